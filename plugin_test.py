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
"""Tests for the protoc plugin entry point and its parameters."""

import unittest

from google.protobuf import descriptor_pb2, text_format
from google.protobuf.compiler import plugin_pb2

from protogen_csharp import options, plugin

DEPENDENCY = """\
name: "pw/dep.proto"
package: "pw.dep"
syntax: "proto3"
message_type {
  name: "Payload"
  field { name: "size" number: 1 label: LABEL_OPTIONAL type: TYPE_UINT32 }
}
"""

MAIN = """\
name: "pw/main.proto"
package: "pw.main"
syntax: "proto3"
dependency: "pw/dep.proto"
message_type {
  name: "Request"
  field {
    name: "payload" number: 1 label: LABEL_OPTIONAL type: TYPE_MESSAGE
    type_name: ".pw.dep.Payload"
  }
}
"""


def _request(
    parameter: str = '', file_to_generate=('pw/main.proto',)
) -> plugin_pb2.CodeGeneratorRequest:
    request = plugin_pb2.CodeGeneratorRequest(
        parameter=parameter, file_to_generate=list(file_to_generate)
    )
    for text in (DEPENDENCY, MAIN):
        request.proto_file.append(
            text_format.Parse(text, descriptor_pb2.FileDescriptorProto())
        )
    return request


class ParameterOptionsTest(unittest.TestCase):
    """Tests parsing of the parameters protoc forwards to the plugin."""

    def test_defaults(self):
        args = options.parse_parameter_options('')
        self.assertEqual('auto', args.name_normalizer)
        self.assertEqual('cs', args.file_extension)
        self.assertFalse(args.verbose)

    def test_comma_separated(self):
        args = options.parse_parameter_options(
            '--names=original,--file-extension=g.cs,--verbose'
        )
        self.assertEqual('original', args.name_normalizer)
        self.assertEqual('g.cs', args.file_extension)
        self.assertTrue(args.verbose)

    def test_invalid_normalizer(self):
        with self.assertRaises(SystemExit):
            options.parse_parameter_options('--names=kebab')

    def test_generator_options(self):
        generator_options = options.generator_options(
            options.parse_parameter_options('--names=original')
        )
        self.assertEqual('original', generator_options.name_normalizer)
        self.assertEqual('cs', generator_options.file_extension)


class ProcessProtoRequestTest(unittest.TestCase):
    """Tests handling a complete CodeGeneratorRequest."""

    def test_generates_only_requested_files(self):
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertTrue(plugin.process_proto_request(_request(), response))

        self.assertEqual(1, len(response.file))
        self.assertEqual('pw/main.cs', response.file[0].name)

    def test_resolves_types_from_dependencies(self):
        response = plugin_pb2.CodeGeneratorResponse()
        plugin.process_proto_request(_request(), response)

        content = response.file[0].content
        self.assertIn('namespace pw.main', content)
        self.assertIn('public Payload Payload { get; set; }', content)

    def test_parameters_are_applied(self):
        response = plugin_pb2.CodeGeneratorResponse()
        plugin.process_proto_request(
            _request('--names=original,--file-extension=g.cs'), response
        )

        self.assertEqual('pw/main.g.cs', response.file[0].name)
        self.assertIn(
            'public Payload payload { get; set; }', response.file[0].content
        )

    def test_multiple_files(self):
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertTrue(
            plugin.process_proto_request(
                _request(file_to_generate=('pw/dep.proto', 'pw/main.proto')),
                response,
            )
        )
        self.assertEqual(
            ['pw/dep.cs', 'pw/main.cs'], [f.name for f in response.file]
        )
        self.assertIn(
            'public uint Size { get; set; }', response.file[0].content
        )

    def test_missing_file_fails(self):
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertFalse(
            plugin.process_proto_request(
                _request(file_to_generate=('pw/absent.proto',)), response
            )
        )
        self.assertEqual(0, len(response.file))


if __name__ == '__main__':
    unittest.main()
