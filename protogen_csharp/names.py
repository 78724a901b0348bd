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
"""Policies for turning schema names into generated identifiers."""

import abc


class NameNormalizer(abc.ABC):
    """Maps a descriptor to the identifier used for it in generated code.

    Applies to messages, enums, enum values and fields. Identifiers returned
    here are not escaped; escaping is the job of the language generator.
    """

    @abc.abstractmethod
    def get_name(self, descriptor) -> str:
        """Returns the identifier for a descriptor_pb2 message, enum, enum
        value or field descriptor."""


class PascalCaseNormalizer(NameNormalizer):
    """Renders schema names as UpperCamelCase.

    field_name becomes FieldName, FAILED_MISERABLY becomes FailedMiserably and
    SomeMessage is left as is.
    """

    def get_name(self, descriptor) -> str:
        return self.upper_camel_case(descriptor.name)

    @staticmethod
    def upper_camel_case(name: str) -> str:
        """Converts a schema name to UpperCamelCase."""
        parts = [part for part in name.split('_') if part]
        if not parts:
            return name

        components = []
        for part in parts:
            if part.isupper():
                part = part.capitalize()
            components.append(part[0].upper() + part[1:])
        return ''.join(components)


class OriginalNameNormalizer(NameNormalizer):
    """Uses the names exactly as they appear in the schema."""

    def get_name(self, descriptor) -> str:
        return descriptor.name


_NORMALIZERS = {
    'auto': PascalCaseNormalizer,
    'original': OriginalNameNormalizer,
}

NORMALIZER_NAMES = tuple(_NORMALIZERS)


def normalizer_for(name: str) -> NameNormalizer:
    """Returns the normalizer registered under the given configuration name."""
    try:
        return _NORMALIZERS[name]()
    except KeyError:
        raise ValueError(
            f'Unknown name normalizer {name!r}; expected one of '
            f'{", ".join(NORMALIZER_NAMES)}'
        ) from None
