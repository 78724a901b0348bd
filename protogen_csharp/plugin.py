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
"""protogen_csharp compiler plugin.

This file implements a protobuf compiler plugin which generates protobuf-net
C# classes for protobuf messages and enums.
"""

import logging
import sys

from google.protobuf.compiler import plugin_pb2

from protogen_csharp import codegen, log, options
from protogen_csharp.codegen_csharp import CSharpCodeGenerator
from protogen_csharp.type_index import TypeIndex

_LOG = logging.getLogger(__name__)


def process_proto_request(
    req: plugin_pb2.CodeGeneratorRequest, res: plugin_pb2.CodeGeneratorResponse
) -> bool:
    """Handles a protoc CodeGeneratorRequest message.

    Generates code for the files in the request and writes the output to the
    specified CodeGeneratorResponse message.

    Args:
      req: A CodeGeneratorRequest for a proto compilation.
      res: A CodeGeneratorResponse to populate with the plugin's output.
    """
    args = options.parse_parameter_options(req.parameter)
    log.install(logging.DEBUG if args.verbose else logging.WARNING)
    codegen_options = options.generator_options(args)

    # The request carries every file the generated ones import, so references
    # into dependencies resolve as well.
    index = TypeIndex.build(req.proto_file)
    proto_files = {proto_file.name: proto_file for proto_file in req.proto_file}
    generator = CSharpCodeGenerator()

    success = True
    for file_name in req.file_to_generate:
        proto_file = proto_files.get(file_name)
        if proto_file is None:
            _LOG.error('%s was requested but not provided by protoc', file_name)
            success = False
            continue

        output_file = codegen.process_proto_file(
            generator, proto_file, index, codegen_options
        )

        if output_file is not None:
            fd = res.file.add()
            fd.name = output_file.name()
            fd.content = output_file.content()
        else:
            success = False

    return success


def main() -> int:
    """Protobuf compiler plugin entrypoint.

    Reads a CodeGeneratorRequest proto from stdin and writes a
    CodeGeneratorResponse to stdout.
    """
    data = sys.stdin.buffer.read()
    request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    response = plugin_pb2.CodeGeneratorResponse()

    # Declare that this plugin supports optional fields in proto3.
    response.supported_features |= (  # type: ignore[attr-defined]
        response.FEATURE_PROTO3_OPTIONAL
    )  # type: ignore[attr-defined]

    if not process_proto_request(request, response):
        print(
            f'{codegen.PLUGIN_NAME} failed to generate C# code',
            file=sys.stderr,
        )
        return 1

    sys.stdout.buffer.write(response.SerializeToString())
    return 0


if __name__ == '__main__':
    sys.exit(main())
