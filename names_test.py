#!/usr/bin/env python3
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
"""Tests for the name normalizers."""

import unittest

from google.protobuf import descriptor_pb2

from protogen_csharp.names import (
    NORMALIZER_NAMES,
    OriginalNameNormalizer,
    PascalCaseNormalizer,
    normalizer_for,
)


class PascalCaseTest(unittest.TestCase):
    """Tests conversion of schema names to UpperCamelCase."""

    def test_conversions(self):
        cases = {
            'field_name': 'FieldName',
            'FAILED_MISERABLY': 'FailedMiserably',
            'SomeMessage': 'SomeMessage',
            'lowercase': 'Lowercase',
            'not_a_map_name': 'NotAMapName',
            'snake__double': 'SnakeDouble',
            '_leading': 'Leading',
            'trailing_': 'Trailing',
            'mixedCase_part': 'MixedCasePart',
            'HTTP2_server': 'Http2Server',
        }
        for name, expected in cases.items():
            with self.subTest(name=name):
                self.assertEqual(
                    expected, PascalCaseNormalizer.upper_camel_case(name)
                )

    def test_only_underscores_is_unchanged(self):
        self.assertEqual('__', PascalCaseNormalizer.upper_camel_case('__'))
        self.assertEqual('', PascalCaseNormalizer.upper_camel_case(''))

    def test_descriptors(self):
        normalizer = PascalCaseNormalizer()
        self.assertEqual(
            'MagicNumber',
            normalizer.get_name(
                descriptor_pb2.FieldDescriptorProto(name='magic_number')
            ),
        )
        self.assertEqual(
            'Ok',
            normalizer.get_name(
                descriptor_pb2.EnumValueDescriptorProto(name='OK')
            ),
        )


class NormalizerRegistryTest(unittest.TestCase):
    """Tests selecting a normalizer by its configuration name."""

    def test_names(self):
        self.assertEqual(('auto', 'original'), NORMALIZER_NAMES)

    def test_auto(self):
        self.assertIsInstance(normalizer_for('auto'), PascalCaseNormalizer)

    def test_original(self):
        normalizer = normalizer_for('original')
        self.assertIsInstance(normalizer, OriginalNameNormalizer)
        self.assertEqual(
            'magic_number',
            normalizer.get_name(
                descriptor_pb2.FieldDescriptorProto(name='magic_number')
            ),
        )

    def test_unknown(self):
        with self.assertRaises(ValueError):
            normalizer_for('kebab')


if __name__ == '__main__':
    unittest.main()
