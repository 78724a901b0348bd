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
"""Index of the messages and enums declared across a set of .proto files.

The index is a tree of nodes mirroring the package hierarchy, so that a
fully-qualified schema name such as ".pkg.Outer.Inner" resolves by walking one
path component at a time.
"""

import collections
import enum
from typing import Iterable, Optional

from google.protobuf import descriptor_pb2


class IndexNode:
    """A package, message or enum in the type index."""

    class Type(enum.Enum):
        """The type of an IndexNode.

        PACKAGE is one component of a .proto package name.
        MESSAGE and ENUM carry the descriptor they were built from.
        """

        PACKAGE = 1
        MESSAGE = 2
        ENUM = 3

    def __init__(self, name: str, node_type: 'IndexNode.Type', descriptor=None):
        self._name: str = name
        self._type = node_type
        self._descriptor = descriptor
        self._children: dict[str, 'IndexNode'] = collections.OrderedDict()
        self._parent: Optional['IndexNode'] = None

    def name(self) -> str:
        return self._name

    def type(self) -> 'IndexNode.Type':
        return self._type

    def descriptor(self):
        return self._descriptor

    def parent(self) -> Optional['IndexNode']:
        return self._parent

    def add_child(self, child: 'IndexNode') -> None:
        """Inserts a node into the tree as a child of this node.

        Raises:
          ValueError: This node does not allow nesting the given type of child.
        """
        if not self._supports_child(child):
            raise ValueError(
                'Invalid child %s for node of type %s'
                % (child.type(), self.type())
            )

        # pylint: disable=protected-access
        if child._parent is not None:
            del child._parent._children[child.name()]

        child._parent = self
        self._children[child.name()] = child
        # pylint: enable=protected-access

    def child(self, name: str) -> Optional['IndexNode']:
        return self._children.get(name)

    def find(self, path: str) -> Optional['IndexNode']:
        """Finds a node within this node's subtree."""
        node = self

        for section in path.split('.'):
            child = node.child(section)
            if child is None:
                return None
            node = child

        return node

    def _supports_child(self, child: 'IndexNode') -> bool:
        if self._type is IndexNode.Type.PACKAGE:
            return True
        if self._type is IndexNode.Type.MESSAGE:
            return child.type() is not IndexNode.Type.PACKAGE
        # Enums cannot have nested children.
        return False


def _package_node(root: IndexNode, package: str) -> IndexNode:
    """Returns the node for a package, creating missing components."""
    node = root
    if not package:
        return node

    for part in package.split('.'):
        child = node.child(part)
        if child is None:
            child = IndexNode(part, IndexNode.Type.PACKAGE)
            node.add_child(child)
        node = child

    return node


def _add_enum(
    parent: IndexNode, proto_enum: descriptor_pb2.EnumDescriptorProto
) -> None:
    parent.add_child(
        IndexNode(proto_enum.name, IndexNode.Type.ENUM, proto_enum)
    )


def _add_message(
    parent: IndexNode, message: descriptor_pb2.DescriptorProto
) -> None:
    """Recursively adds a message and its nested types."""
    node = IndexNode(message.name, IndexNode.Type.MESSAGE, message)
    parent.add_child(node)

    for proto_enum in message.enum_type:
        _add_enum(node, proto_enum)
    for nested in message.nested_type:
        _add_message(node, nested)


class TypeIndex:
    """Resolves fully-qualified schema names to their descriptors.

    Built once per code generation request, before any file is generated.
    Lookups return None on a miss rather than raising.
    """

    def __init__(self):
        self._root = IndexNode('', IndexNode.Type.PACKAGE)

    @classmethod
    def build(
        cls, proto_files: Iterable[descriptor_pb2.FileDescriptorProto]
    ) -> 'TypeIndex':
        index = cls()
        for proto_file in proto_files:
            index.add_file(proto_file)
        return index

    def add_file(self, proto_file: descriptor_pb2.FileDescriptorProto) -> None:
        """Adds every message and enum declared in a file to the index."""
        package_root = _package_node(self._root, proto_file.package)

        for proto_enum in proto_file.enum_type:
            _add_enum(package_root, proto_enum)
        for message in proto_file.message_type:
            _add_message(package_root, message)

    def find_node(self, type_name: str) -> Optional[IndexNode]:
        path = type_name.lstrip('.')
        if not path:
            return None
        return self._root.find(path)

    def find_message(
        self, type_name: str
    ) -> Optional[descriptor_pb2.DescriptorProto]:
        node = self.find_node(type_name)
        if node is None or node.type() is not IndexNode.Type.MESSAGE:
            return None
        return node.descriptor()

    def find_enum(
        self, type_name: str
    ) -> Optional[descriptor_pb2.EnumDescriptorProto]:
        node = self.find_node(type_name)
        if node is None or node.type() is not IndexNode.Type.ENUM:
            return None
        return node.descriptor()
