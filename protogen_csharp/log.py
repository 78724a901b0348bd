# Copyright 2024 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""Tools for configuring Python logging in the plugin process.

protoc reads the plugin's response from stdout, so logs only go to stderr.
"""

import logging
from typing import NamedTuple


class _LogLevel(NamedTuple):
    level: int
    ascii: str


# Shorten all the log levels to 3 characters for column-aligned logs.
_LOG_LEVELS = (
    _LogLevel(logging.CRITICAL, 'CRT'),
    _LogLevel(logging.ERROR,    'ERR'),
    _LogLevel(logging.WARNING,  'WRN'),
    _LogLevel(logging.INFO,     'INF'),
    _LogLevel(logging.DEBUG,    'DBG'),
)  # yapf: disable

_STDERR_HANDLER = logging.StreamHandler()


def install(level: int = logging.WARNING) -> None:
    """Configures the root logger to write the plugin's logs to stderr."""
    formatter = logging.Formatter('%(levelname)s %(message)s')

    _STDERR_HANDLER.setLevel(level)
    _STDERR_HANDLER.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(min(level, root.getEffectiveLevel()))
    if _STDERR_HANDLER not in root.handlers:
        root.addHandler(_STDERR_HANDLER)

    for log_level in _LOG_LEVELS:
        logging.addLevelName(log_level.level, log_level.ascii)
