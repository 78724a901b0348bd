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
"""Parsing of the parameters protoc passes through to the plugin."""

from argparse import ArgumentParser, Namespace
from shlex import shlex

from protogen_csharp.codegen import GeneratorOptions
from protogen_csharp.names import NORMALIZER_NAMES


def argument_parser() -> ArgumentParser:
    """Registers the plugin's parameters on an argument parser."""
    parser = ArgumentParser(prog='protoc-gen-csharp')
    parser.add_argument(
        '--names',
        dest='name_normalizer',
        choices=NORMALIZER_NAMES,
        default='auto',
        help='How schema names become C# identifiers: "auto" converts them '
        'to PascalCase, "original" keeps them as written',
    )
    parser.add_argument(
        '--file-extension',
        dest='file_extension',
        default='cs',
        help='Extension of the generated files',
    )
    parser.add_argument(
        '--verbose',
        dest='verbose',
        action='store_true',
        help='Log debug messages, including unresolved type references',
    )
    return parser


def parse_parameter_options(parameter: str) -> Namespace:
    """Parses parameters passed through from protoc.

    These parameters come in via passing `--${NAME}_opt` parameters to protoc,
    where protoc-gen-${NAME} is the supplied name of the plugin.
    """
    # protoc passes the custom arguments in shell quoted form, separated by
    # commas. Use shlex to split them, correctly handling quoted sections, with
    # equivalent options to IFS=","
    lex = shlex(parameter)
    lex.whitespace_split = True
    lex.whitespace = ','
    lex.commenters = ''
    args = list(lex)

    return argument_parser().parse_args(args)


def generator_options(args: Namespace) -> GeneratorOptions:
    return GeneratorOptions(
        name_normalizer=args.name_normalizer,
        file_extension=args.file_extension,
    )
