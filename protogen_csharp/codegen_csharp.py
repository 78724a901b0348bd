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
"""This module defines the generated code for protobuf-net C# classes.

Every field is emitted as exactly one of the following shapes:

  * a container (fixed array, List<T> or Dictionary<K, V>) for repeated and
    map fields;
  * a pair of accessors over a discriminated union slot shared by all members
    of a oneof with two or more members;
  * an accessor over a hidden nullable backing field, for proto2 optional
    scalars that need explicit presence tracking;
  * a plain auto-property, for everything else.
"""

import logging
import os
from typing import NamedTuple, Optional, Sequence

from google.protobuf import descriptor_pb2

from protogen_csharp.codegen import (
    CodegenError,
    FileScope,
    GeneratorContext,
    GeneratorOptions,
    LanguageGenerator,
    OneofStub,
    SYNTAX_PROTO2,
)

_LOG = logging.getLogger(__name__)

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

WELL_KNOWN_TYPE_TIMESTAMP = '.google.protobuf.Timestamp'
WELL_KNOWN_TYPE_DURATION = '.google.protobuf.Duration'

# Prefix of generated private members, chosen so they never collide with the
# normalized name of a field.
FIELD_PREFIX = '__pbn__'

WARNINGS_SUPPRESSED = 'CS1591, CS0612, CS3021'

_PROTOBUF_NAMESPACE = 'global::ProtoBuf'
_COLLECTIONS_NAMESPACE = 'global::System.Collections.Generic'

_RESERVED_WORDS = frozenset(
    [
        'abstract', 'as', 'base', 'bool', 'break', 'byte', 'case', 'catch',
        'char', 'checked', 'class', 'const', 'continue', 'decimal', 'default',
        'delegate', 'do', 'double', 'else', 'enum', 'event', 'explicit',
        'extern', 'false', 'finally', 'fixed', 'float', 'for', 'foreach',
        'goto', 'if', 'implicit', 'in', 'int', 'interface', 'internal', 'is',
        'lock', 'long', 'namespace', 'new', 'null', 'object', 'operator',
        'out', 'override', 'params', 'private', 'protected', 'public',
        'readonly', 'ref', 'return', 'sbyte', 'sealed', 'short', 'sizeof',
        'stackalloc', 'static', 'string', 'struct', 'switch', 'this', 'throw',
        'true', 'try', 'typeof', 'uint', 'ulong', 'unchecked', 'unsafe',
        'ushort', 'using', 'virtual', 'void', 'volatile', 'while',
    ]
)  # yapf: disable

# (C# type, DataFormat) for each scalar field type.
_SCALAR_TYPES: dict[int, tuple[str, str]] = {
    FieldDescriptorProto.TYPE_DOUBLE: ('double', ''),
    FieldDescriptorProto.TYPE_FLOAT: ('float', ''),
    FieldDescriptorProto.TYPE_BOOL: ('bool', ''),
    FieldDescriptorProto.TYPE_STRING: ('string', ''),
    FieldDescriptorProto.TYPE_BYTES: ('byte[]', ''),
    FieldDescriptorProto.TYPE_INT32: ('int', ''),
    FieldDescriptorProto.TYPE_SINT32: ('int', 'ZigZag'),
    FieldDescriptorProto.TYPE_SFIXED32: ('int', 'FixedSize'),
    FieldDescriptorProto.TYPE_INT64: ('long', ''),
    FieldDescriptorProto.TYPE_SINT64: ('long', 'ZigZag'),
    FieldDescriptorProto.TYPE_SFIXED64: ('long', 'FixedSize'),
    FieldDescriptorProto.TYPE_UINT32: ('uint', ''),
    FieldDescriptorProto.TYPE_FIXED32: ('uint', 'FixedSize'),
    FieldDescriptorProto.TYPE_UINT64: ('ulong', ''),
    FieldDescriptorProto.TYPE_FIXED64: ('ulong', 'FixedSize'),
}

_WELL_KNOWN_TYPES: dict[str, str] = {
    WELL_KNOWN_TYPE_TIMESTAMP: 'global::System.DateTime?',
    WELL_KNOWN_TYPE_DURATION: 'global::System.TimeSpan?',
}

# Repeated fields of these types are declared as T[] rather than List<T>.
_ARRAY_TYPES = frozenset(
    [
        FieldDescriptorProto.TYPE_BOOL,
        FieldDescriptorProto.TYPE_DOUBLE,
        FieldDescriptorProto.TYPE_FLOAT,
        FieldDescriptorProto.TYPE_INT32,
        FieldDescriptorProto.TYPE_INT64,
        FieldDescriptorProto.TYPE_UINT32,
        FieldDescriptorProto.TYPE_UINT64,
        FieldDescriptorProto.TYPE_SINT32,
        FieldDescriptorProto.TYPE_SINT64,
        FieldDescriptorProto.TYPE_FIXED32,
        FieldDescriptorProto.TYPE_FIXED64,
        FieldDescriptorProto.TYPE_SFIXED32,
        FieldDescriptorProto.TYPE_SFIXED64,
    ]
)

_NOT_PACKABLE = frozenset(
    [
        FieldDescriptorProto.TYPE_STRING,
        FieldDescriptorProto.TYPE_BYTES,
        FieldDescriptorProto.TYPE_MESSAGE,
        FieldDescriptorProto.TYPE_GROUP,
    ]
)

_REFERENCE_TYPES = frozenset(
    [FieldDescriptorProto.TYPE_STRING, FieldDescriptorProto.TYPE_BYTES]
)

# Oneof members of these types hold their payload as object or int and need a
# cast back to the declared type.
_CAST_FROM_UNION = frozenset(
    [
        FieldDescriptorProto.TYPE_MESSAGE,
        FieldDescriptorProto.TYPE_GROUP,
        FieldDescriptorProto.TYPE_ENUM,
        FieldDescriptorProto.TYPE_BYTES,
        FieldDescriptorProto.TYPE_STRING,
    ]
)

# Member of the protobuf-net DiscriminatedUnion types that holds each kind.
_UNION_STORAGE = {
    FieldDescriptorProto.TYPE_BOOL: 'Boolean',
    FieldDescriptorProto.TYPE_INT32: 'Int32',
    FieldDescriptorProto.TYPE_SINT32: 'Int32',
    FieldDescriptorProto.TYPE_SFIXED32: 'Int32',
    FieldDescriptorProto.TYPE_ENUM: 'Int32',
    FieldDescriptorProto.TYPE_UINT32: 'UInt32',
    FieldDescriptorProto.TYPE_FIXED32: 'UInt32',
    FieldDescriptorProto.TYPE_FLOAT: 'Single',
    FieldDescriptorProto.TYPE_INT64: 'Int64',
    FieldDescriptorProto.TYPE_SINT64: 'Int64',
    FieldDescriptorProto.TYPE_SFIXED64: 'Int64',
    FieldDescriptorProto.TYPE_UINT64: 'UInt64',
    FieldDescriptorProto.TYPE_FIXED64: 'UInt64',
    FieldDescriptorProto.TYPE_DOUBLE: 'Double',
}

_FLOATING_POINT_TYPES = {
    FieldDescriptorProto.TYPE_DOUBLE: 'double',
    FieldDescriptorProto.TYPE_FLOAT: 'float',
}

_FLOATING_POINT_CONSTANTS = {
    'inf': 'PositiveInfinity',
    '-inf': 'NegativeInfinity',
    'nan': 'NaN',
}


class ResolvedType(NamedTuple):
    """A field's C# type and the wire-format hint needed to serialize it."""

    type_name: str
    data_format: str = ''
    is_map: bool = False


def escape(identifier: str) -> str:
    """Returns identifier, prefixed with @ if it is a C# keyword."""
    if identifier in _RESERVED_WORDS:
        return '@' + identifier
    return identifier


def _verbatim_string(text: str) -> str:
    return '@"' + text.replace('"', '""') + '"'


def resolve_type(
    ctx: GeneratorContext, field: descriptor_pb2.FieldDescriptorProto
) -> ResolvedType:
    """Determines the C# type of a single (non-repeated) field value.

    References that cannot be resolved fall back to the schema's type name so
    that generation can continue; the result may not compile.
    """
    scalar = _SCALAR_TYPES.get(field.type)
    if scalar is not None:
        return ResolvedType(*scalar)

    if field.type == FieldDescriptorProto.TYPE_ENUM:
        proto_enum = ctx.find_enum(field.type_name)
        if proto_enum is None:
            _LOG.debug(
                'Unresolved enum %s for field %s', field.type_name, field.name
            )
            return ResolvedType(field.type_name)
        return ResolvedType(escape(ctx.get_name(proto_enum)))

    if field.type in (
        FieldDescriptorProto.TYPE_MESSAGE,
        FieldDescriptorProto.TYPE_GROUP,
    ):
        well_known = _WELL_KNOWN_TYPES.get(field.type_name)
        if well_known is not None:
            return ResolvedType(well_known, 'WellKnown')

        message = ctx.find_message(field.type_name)
        if message is None:
            _LOG.debug(
                'Unresolved message %s for field %s',
                field.type_name,
                field.name,
            )
            return ResolvedType(field.type_name)

        data_format = (
            'Group' if field.type == FieldDescriptorProto.TYPE_GROUP else ''
        )
        return ResolvedType(
            escape(ctx.get_name(message)),
            data_format,
            message.options.map_entry,
        )

    _LOG.debug('Unsupported type %d for field %s', field.type, field.name)
    return ResolvedType(field.type_name)


def render_default(
    ctx: GeneratorContext, field: descriptor_pb2.FieldDescriptorProto
) -> Optional[str]:
    """Returns a C# expression for a field's default value, if it has one.

    Only optional fields have defaults. String fields always have one, since
    protobuf-net treats an unset string as empty.
    """
    if field.label != FieldDescriptorProto.LABEL_OPTIONAL:
        return None

    default_value = field.default_value

    if field.type == FieldDescriptorProto.TYPE_STRING:
        if not default_value:
            return '""'
        return _verbatim_string(default_value)

    if not field.HasField('default_value'):
        return None

    if field.type in _FLOATING_POINT_TYPES:
        constant = _FLOATING_POINT_CONSTANTS.get(default_value)
        if constant is not None:
            return f'{_FLOATING_POINT_TYPES[field.type]}.{constant}'
        return default_value

    if field.type == FieldDescriptorProto.TYPE_ENUM and default_value.strip():
        proto_enum = ctx.find_enum(field.type_name)
        if proto_enum is None:
            return default_value

        value_name = default_value
        for value in proto_enum.value:
            if value.name == default_value:
                value_name = escape(ctx.get_name(value))
                break
        else:
            _LOG.debug(
                'Default %s of field %s is not a value of %s',
                default_value,
                field.name,
                field.type_name,
            )
        return f'{escape(ctx.get_name(proto_enum))}.{value_name}'

    return default_value


def _union_type(oneof: OneofStub) -> str:
    """Picks the smallest protobuf-net union able to hold every member."""
    if oneof.count_64:
        return (
            'DiscriminatedUnion64Object'
            if oneof.count_ref
            else 'DiscriminatedUnion64'
        )
    if oneof.count_32:
        return (
            'DiscriminatedUnion32Object'
            if oneof.count_ref
            else 'DiscriminatedUnion32'
        )
    return 'DiscriminatedUnionObject'


def _write_obsolete(ctx: GeneratorContext, options) -> None:
    if options.deprecated:
        ctx.output.write_line('[global::System.Obsolete]')


class CSharpCodeGenerator(LanguageGenerator):
    """Generates protobuf-net annotated C# types."""

    def name(self) -> str:
        return 'C#'

    def escape(self, identifier: str) -> str:
        return escape(identifier)

    def output_filename(
        self,
        proto_file: descriptor_pb2.FileDescriptorProto,
        options: GeneratorOptions,
    ) -> str:
        extension = options.file_extension.lstrip('.')
        return f'{os.path.splitext(proto_file.name)[0]}.{extension}'

    def write_file_header(self, ctx: GeneratorContext) -> FileScope:
        output = ctx.output
        output.write_line(
            '// This file was generated by a tool; '
            'you should avoid making direct changes.'
        )
        output.write_line(
            "// Consider using 'partial classes' to extend these types"
        )
        output.write_line(
            f'// Input: {os.path.basename(ctx.proto_file.name)}'
        )
        output.write_line()
        output.write_line(f'#pragma warning disable {WARNINGS_SUPPRESSED}')
        output.write_line()

        if ctx.proto_file.options.HasField('csharp_namespace'):
            namespace = ctx.proto_file.options.csharp_namespace
        else:
            namespace = ctx.proto_file.package

        if not namespace.strip():
            return FileScope()

        output.write_line(f'namespace {namespace}')
        output.write_line('{')
        output.push_indent()
        output.write_line()
        return FileScope(namespace)

    def write_file_footer(
        self, ctx: GeneratorContext, scope: FileScope
    ) -> None:
        output = ctx.output
        if scope.namespace:
            output.pop_indent()
            output.write_line('}')
            output.write_line()
        output.write_line(f'#pragma warning restore {WARNINGS_SUPPRESSED}')

    def write_enum_header(
        self,
        ctx: GeneratorContext,
        proto_enum: descriptor_pb2.EnumDescriptorProto,
    ) -> None:
        output = ctx.output
        output.write_line(
            f'[{_PROTOBUF_NAMESPACE}.ProtoContract'
            f'(Name = {_verbatim_string(proto_enum.name)})]'
        )
        _write_obsolete(ctx, proto_enum.options)
        output.write_line(f'public enum {escape(ctx.get_name(proto_enum))}')
        output.write_line('{')
        output.push_indent()

    def write_enum_footer(
        self,
        ctx: GeneratorContext,
        proto_enum: descriptor_pb2.EnumDescriptorProto,
    ) -> None:
        ctx.output.pop_indent()
        ctx.output.write_line('}')
        ctx.output.write_line()

    def write_enum_value(
        self,
        ctx: GeneratorContext,
        value: descriptor_pb2.EnumValueDescriptorProto,
    ) -> None:
        output = ctx.output
        output.write_line(
            f'[{_PROTOBUF_NAMESPACE}.ProtoEnum'
            f'(Name = {_verbatim_string(value.name)}, Value = {value.number})]'
        )
        _write_obsolete(ctx, value.options)
        output.write_line(f'{escape(ctx.get_name(value))} = {value.number},')

    def write_message_header(
        self, ctx: GeneratorContext, message: descriptor_pb2.DescriptorProto
    ) -> None:
        output = ctx.output
        output.write_line(
            f'[{_PROTOBUF_NAMESPACE}.ProtoContract'
            f'(Name = {_verbatim_string(message.name)})]'
        )
        _write_obsolete(ctx, message.options)
        output.write_line(
            f'public partial class {escape(ctx.get_name(message))}'
        )
        output.write_line('{')
        output.push_indent()

    def write_message_footer(
        self, ctx: GeneratorContext, message: descriptor_pb2.DescriptorProto
    ) -> None:
        ctx.output.pop_indent()
        ctx.output.write_line('}')
        ctx.output.write_line()

    def write_field(
        self,
        ctx: GeneratorContext,
        field: descriptor_pb2.FieldDescriptorProto,
        oneofs: Sequence[OneofStub],
    ) -> None:
        """Declares a field in the shape its label and oneof call for."""
        output = ctx.output
        name = ctx.get_name(field)
        is_optional = field.label == FieldDescriptorProto.LABEL_OPTIONAL
        is_repeated = field.label == FieldDescriptorProto.LABEL_REPEATED

        oneof: Optional[OneofStub] = None
        if field.HasField('oneof_index'):
            oneof = oneofs[field.oneof_index]
            if oneof.count_total < 2:
                # A single member oneof is not really a oneof.
                oneof = None

        explicit_presence = (
            is_optional
            and oneof is None
            and ctx.syntax == SYNTAX_PROTO2
            and field.type
            not in (
                FieldDescriptorProto.TYPE_MESSAGE,
                FieldDescriptorProto.TYPE_GROUP,
            )
        )

        default_value = render_default(ctx, field)
        resolved = resolve_type(ctx, field)

        output.write(
            f'[{_PROTOBUF_NAMESPACE}.ProtoMember({field.number}, '
            f'Name = {_verbatim_string(field.name)}'
        )
        if resolved.data_format:
            output.write(
                f', DataFormat = {_PROTOBUF_NAMESPACE}.DataFormat.'
                f'{resolved.data_format}'
            )
        if field.options.packed and field.type not in _NOT_PACKABLE:
            output.write(', IsPacked = true')
        if field.label == FieldDescriptorProto.LABEL_REQUIRED:
            output.write(', IsRequired = true')
        output.write_line(')]')

        # Explicit presence already expresses the default through the getter.
        if not is_repeated and default_value and not explicit_presence:
            output.write_line(
                '[global::System.ComponentModel.DefaultValue'
                f'({default_value})]'
            )
        _write_obsolete(ctx, field.options)

        if is_repeated:
            self._write_container(ctx, field, name, resolved)
        elif oneof is not None:
            self._write_oneof_member(
                ctx, field, name, resolved.type_name, default_value, oneof
            )
        elif explicit_presence:
            self._write_explicit_presence(
                ctx, field, name, resolved.type_name, default_value
            )
        else:
            output.write(
                f'public {resolved.type_name} {escape(name)} {{ get; set; }}'
            )
            if default_value:
                output.write(f' = {default_value};')
            output.write_line()

        output.write_line()

    def _write_container(
        self,
        ctx: GeneratorContext,
        field: descriptor_pb2.FieldDescriptorProto,
        name: str,
        resolved: ResolvedType,
    ) -> None:
        """Declares a repeated field as a dictionary, array or list."""
        output = ctx.output

        map_entry = (
            ctx.find_message(field.type_name) if resolved.is_map else None
        )
        if map_entry is not None:
            key_field = _map_entry_field(map_entry, 1)
            value_field = _map_entry_field(map_entry, 2)
            key = resolve_type(ctx, key_field)
            value = resolve_type(ctx, value_field)

            formats = []
            if key.data_format:
                formats.append(
                    f'KeyFormat = {_PROTOBUF_NAMESPACE}.DataFormat.'
                    f'{key.data_format}'
                )
            if value.data_format:
                formats.append(
                    f'ValueFormat = {_PROTOBUF_NAMESPACE}.DataFormat.'
                    f'{value.data_format}'
                )
            if formats:
                output.write_line(
                    f'[{_PROTOBUF_NAMESPACE}.ProtoMap({", ".join(formats)})]'
                )
            else:
                output.write_line(f'[{_PROTOBUF_NAMESPACE}.ProtoMap]')

            dictionary = (
                f'{_COLLECTIONS_NAMESPACE}.Dictionary'
                f'<{key.type_name}, {value.type_name}>'
            )
            output.write_line(
                f'public {dictionary} {escape(name)} {{ get; }} '
                f'= new {dictionary}();'
            )
        elif field.type in _ARRAY_TYPES:
            output.write_line(
                f'public {resolved.type_name}[] {escape(name)} '
                '{ get; set; }'
            )
        else:
            collection = f'{_COLLECTIONS_NAMESPACE}.List<{resolved.type_name}>'
            output.write_line(
                f'public {collection} {escape(name)} {{ get; }} '
                f'= new {collection}();'
            )

    def _write_oneof_member(
        self,
        ctx: GeneratorContext,
        field: descriptor_pb2.FieldDescriptorProto,
        name: str,
        type_name: str,
        default_value: Optional[str],
        oneof: OneofStub,
    ) -> None:
        """Declares accessors over the slot shared by a oneof's members.

        The slot itself is declared once, after the first member.
        """
        output = ctx.output
        number = field.number
        slot = FIELD_PREFIX + oneof.name()
        storage = _UNION_STORAGE.get(field.type, 'Object')
        union_type = f'{_PROTOBUF_NAMESPACE}.{_union_type(oneof)}'
        fallback = default_value or f'default({type_name})'

        if field.type in _CAST_FROM_UNION:
            payload = f'(({type_name}){slot}.{storage})'
        else:
            payload = f'{slot}.{storage}'

        # Enums are stored in the Int32 member, not boxed as an object.
        if field.type == FieldDescriptorProto.TYPE_ENUM:
            stored = '(int)value'
        else:
            stored = 'value'

        output.write_line(f'public {type_name} {escape(name)}')
        output.write_line('{')
        with output.indent():
            output.write_line(
                f'get {{ return {slot}.Is({number}) ? {payload} '
                f': {fallback}; }}'
            )
            output.write_line(
                f'set {{ {slot} = new {union_type}({number}, {stored}); }}'
            )
        output.write_line('}')
        output.write_line(
            f'public bool ShouldSerialize{name}() => {slot}.Is({number});'
        )
        output.write_line(
            f'public void Reset{name}() => '
            f'{union_type}.Reset(ref {slot}, {number});'
        )

        if oneof.claim_slot():
            output.write_line()
            output.write_line(f'private {union_type} {slot};')

    def _write_explicit_presence(
        self,
        ctx: GeneratorContext,
        field: descriptor_pb2.FieldDescriptorProto,
        name: str,
        type_name: str,
        default_value: Optional[str],
    ) -> None:
        """Declares an accessor over a nullable backing field."""
        output = ctx.output
        backing = FIELD_PREFIX + name
        is_reference = field.type in _REFERENCE_TYPES
        backing_type = type_name if is_reference else f'{type_name}?'

        if default_value:
            value = f'{backing} ?? {default_value}'
        elif is_reference:
            value = backing
        else:
            value = f'{backing}.GetValueOrDefault()'

        output.write_line(f'public {type_name} {escape(name)}')
        output.write_line('{')
        with output.indent():
            output.write_line(f'get {{ return {value}; }}')
            output.write_line(f'set {{ {backing} = value; }}')
        output.write_line('}')
        output.write_line(
            f'public bool ShouldSerialize{name}() => {backing} != null;'
        )
        output.write_line(f'public void Reset{name}() => {backing} = null;')
        output.write_line(f'private {backing_type} {backing};')


def _map_entry_field(
    map_entry: descriptor_pb2.DescriptorProto, number: int
) -> descriptor_pb2.FieldDescriptorProto:
    for field in map_entry.field:
        if field.number == number:
            return field

    raise CodegenError(
        f'map entry is missing its {"key" if number == 1 else "value"} field',
        map_entry,
    )
