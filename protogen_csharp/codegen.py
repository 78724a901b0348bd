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
"""Language-independent code generation driver.

The driver owns traversal order. It visits a file, then its messages and
enums, then the fields and values within them, and calls the matching hook of
a LanguageGenerator for each. Hooks write to the OutputFile in the
GeneratorContext and hold no state between calls; anything that must pair an
opening hook with its closing hook is returned and passed back explicitly.
"""

import abc
from dataclasses import dataclass
import enum
import logging
from typing import Optional, Sequence

from google.protobuf import descriptor_pb2

from protogen_csharp.names import NameNormalizer, normalizer_for
from protogen_csharp.output_file import OutputFile
from protogen_csharp.type_index import TypeIndex

_LOG = logging.getLogger(__name__)

PLUGIN_NAME = 'protogen_csharp'

SYNTAX_PROTO2 = 'proto2'
SYNTAX_PROTO3 = 'proto3'


@dataclass
class GeneratorOptions:
    name_normalizer: str = 'auto'
    file_extension: str = 'cs'


class CodegenError(Exception):
    def __init__(
        self,
        error_message: str,
        node: descriptor_pb2.DescriptorProto,
        field: Optional[descriptor_pb2.FieldDescriptorProto] = None,
    ):
        super().__init__(f'{PLUGIN_NAME} codegen error: {error_message}')
        self.error_message = error_message
        self.node = node
        self.field = field

    def formatted_message(self) -> str:
        lines = [
            f'{PLUGIN_NAME} codegen error: {self.error_message}',
            f'    at {self.node.name}',
        ]

        if self.field is not None:
            lines.append(f'    in field {self.field.name}')

        return '\n'.join(lines)


@dataclass
class GeneratorContext:
    """Everything a hook needs to render one entity of one file."""

    proto_file: descriptor_pb2.FileDescriptorProto
    output: OutputFile
    index: TypeIndex
    normalizer: NameNormalizer
    options: GeneratorOptions

    @property
    def syntax(self) -> str:
        # protoc leaves the syntax field empty for proto2 files.
        return self.proto_file.syntax or SYNTAX_PROTO2

    def get_name(self, descriptor) -> str:
        return self.normalizer.get_name(descriptor)

    def find_message(
        self, type_name: str
    ) -> Optional[descriptor_pb2.DescriptorProto]:
        return self.index.find_message(type_name)

    def find_enum(
        self, type_name: str
    ) -> Optional[descriptor_pb2.EnumDescriptorProto]:
        return self.index.find_enum(type_name)


class Storage(enum.Enum):
    """How a field value is held in a shared oneof slot."""

    BITS_32 = 1
    BITS_64 = 2
    REFERENCE = 3


_FIELD_STORAGE = {
    descriptor_pb2.FieldDescriptorProto.TYPE_BOOL: Storage.BITS_32,
    descriptor_pb2.FieldDescriptorProto.TYPE_ENUM: Storage.BITS_32,
    descriptor_pb2.FieldDescriptorProto.TYPE_FLOAT: Storage.BITS_32,
    descriptor_pb2.FieldDescriptorProto.TYPE_INT32: Storage.BITS_32,
    descriptor_pb2.FieldDescriptorProto.TYPE_SINT32: Storage.BITS_32,
    descriptor_pb2.FieldDescriptorProto.TYPE_SFIXED32: Storage.BITS_32,
    descriptor_pb2.FieldDescriptorProto.TYPE_UINT32: Storage.BITS_32,
    descriptor_pb2.FieldDescriptorProto.TYPE_FIXED32: Storage.BITS_32,
    descriptor_pb2.FieldDescriptorProto.TYPE_DOUBLE: Storage.BITS_64,
    descriptor_pb2.FieldDescriptorProto.TYPE_INT64: Storage.BITS_64,
    descriptor_pb2.FieldDescriptorProto.TYPE_SINT64: Storage.BITS_64,
    descriptor_pb2.FieldDescriptorProto.TYPE_SFIXED64: Storage.BITS_64,
    descriptor_pb2.FieldDescriptorProto.TYPE_UINT64: Storage.BITS_64,
    descriptor_pb2.FieldDescriptorProto.TYPE_FIXED64: Storage.BITS_64,
}


def field_storage(field_type: int) -> Storage:
    return _FIELD_STORAGE.get(field_type, Storage.REFERENCE)


class OneofStub:
    """Per-message bookkeeping for one oneof group.

    Members are reconstructed from the fields whose oneof_index points at the
    oneof. The stub also records whether the group's shared backing slot has
    been declared yet, so that it is declared exactly once, on the first
    member in declaration order.
    """

    def __init__(self, oneof: descriptor_pb2.OneofDescriptorProto):
        self.oneof = oneof
        self.count_total = 0
        self.count_32 = 0
        self.count_64 = 0
        self.count_ref = 0
        self._slot_declared = False

    def name(self) -> str:
        return self.oneof.name

    def add_member(self, field: descriptor_pb2.FieldDescriptorProto) -> None:
        self.count_total += 1
        storage = field_storage(field.type)
        if storage is Storage.BITS_32:
            self.count_32 += 1
        elif storage is Storage.BITS_64:
            self.count_64 += 1
        else:
            self.count_ref += 1

    def claim_slot(self) -> bool:
        """Returns True the first time it is called, False afterwards."""
        if self._slot_declared:
            return False
        self._slot_declared = True
        return True


def build_oneof_stubs(
    message: descriptor_pb2.DescriptorProto,
) -> list[OneofStub]:
    stubs = [OneofStub(oneof) for oneof in message.oneof_decl]
    for field in message.field:
        if field.HasField('oneof_index'):
            stubs[field.oneof_index].add_member(field)
    return stubs


@dataclass(frozen=True)
class FileScope:
    """Value handed from a file header hook to the matching footer hook."""

    namespace: Optional[str] = None


class LanguageGenerator(abc.ABC):
    """The set of hooks that renders schema entities in one target language."""

    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable name of the target language, e.g. C#."""

    @abc.abstractmethod
    def escape(self, identifier: str) -> str:
        """Guards an identifier against the language's reserved words."""

    @abc.abstractmethod
    def write_file_header(self, ctx: GeneratorContext) -> FileScope:
        """Writes the file preamble and opens any file-wide scope."""

    @abc.abstractmethod
    def write_file_footer(self, ctx: GeneratorContext, scope: FileScope):
        """Closes the scope opened by write_file_header."""

    @abc.abstractmethod
    def write_message_header(
        self, ctx: GeneratorContext, message: descriptor_pb2.DescriptorProto
    ) -> None:
        """Opens the declaration of a message type."""

    @abc.abstractmethod
    def write_message_footer(
        self, ctx: GeneratorContext, message: descriptor_pb2.DescriptorProto
    ) -> None:
        """Closes the declaration of a message type."""

    @abc.abstractmethod
    def write_field(
        self,
        ctx: GeneratorContext,
        field: descriptor_pb2.FieldDescriptorProto,
        oneofs: Sequence[OneofStub],
    ) -> None:
        """Declares one field of the message currently being written."""

    @abc.abstractmethod
    def write_enum_header(
        self,
        ctx: GeneratorContext,
        proto_enum: descriptor_pb2.EnumDescriptorProto,
    ) -> None:
        """Opens the declaration of an enum type."""

    @abc.abstractmethod
    def write_enum_footer(
        self,
        ctx: GeneratorContext,
        proto_enum: descriptor_pb2.EnumDescriptorProto,
    ) -> None:
        """Closes the declaration of an enum type."""

    @abc.abstractmethod
    def write_enum_value(
        self,
        ctx: GeneratorContext,
        value: descriptor_pb2.EnumValueDescriptorProto,
    ) -> None:
        """Declares one value of the enum currently being written."""

    @abc.abstractmethod
    def output_filename(
        self,
        proto_file: descriptor_pb2.FileDescriptorProto,
        options: GeneratorOptions,
    ) -> str:
        """Returns the name of the generated file for a .proto file."""


def generate_enum(
    generator: LanguageGenerator,
    ctx: GeneratorContext,
    proto_enum: descriptor_pb2.EnumDescriptorProto,
) -> None:
    generator.write_enum_header(ctx, proto_enum)
    for value in proto_enum.value:
        generator.write_enum_value(ctx, value)
    generator.write_enum_footer(ctx, proto_enum)


def generate_message(
    generator: LanguageGenerator,
    ctx: GeneratorContext,
    message: descriptor_pb2.DescriptorProto,
) -> None:
    """Writes a message, its fields and its nested types."""
    oneofs = build_oneof_stubs(message)

    generator.write_message_header(ctx, message)

    for field in message.field:
        generator.write_field(ctx, field, oneofs)

    for nested in message.nested_type:
        # Map entries are folded into their map fields.
        if nested.options.map_entry:
            continue
        generate_message(generator, ctx, nested)

    for proto_enum in message.enum_type:
        generate_enum(generator, ctx, proto_enum)

    generator.write_message_footer(ctx, message)


def generate_file(
    generator: LanguageGenerator,
    proto_file: descriptor_pb2.FileDescriptorProto,
    index: TypeIndex,
    options: GeneratorOptions,
) -> OutputFile:
    """Generates the single source file corresponding to a .proto file."""
    output = OutputFile(generator.output_filename(proto_file, options))
    ctx = GeneratorContext(
        proto_file=proto_file,
        output=output,
        index=index,
        normalizer=normalizer_for(options.name_normalizer),
        options=options,
    )

    _LOG.debug(
        'Generating %s code for %s into %s',
        generator.name(),
        proto_file.name,
        output.name(),
    )

    scope = generator.write_file_header(ctx)

    for message in proto_file.message_type:
        generate_message(generator, ctx, message)

    for proto_enum in proto_file.enum_type:
        generate_enum(generator, ctx, proto_enum)

    generator.write_file_footer(ctx, scope)
    return output


def process_proto_file(
    generator: LanguageGenerator,
    proto_file: descriptor_pb2.FileDescriptorProto,
    index: TypeIndex,
    options: GeneratorOptions,
) -> Optional[OutputFile]:
    """Generates code for a single .proto file.

    Returns None if the file could not be generated; the reason is logged.
    """
    try:
        return generate_file(generator, proto_file, index, options)
    except CodegenError as e:
        _LOG.error('%s\n    in %s', e.formatted_message(), proto_file.name)
        return None
