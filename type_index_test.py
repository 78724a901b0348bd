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
"""Tests for the type index."""

import unittest

from google.protobuf import descriptor_pb2, text_format

from protogen_csharp.type_index import IndexNode, TypeIndex

FILE_1 = """\
name: "pw/one.proto"
package: "pw.test"
message_type {
  name: "Outer"
  nested_type {
    name: "Inner"
    enum_type { name: "Mode" value { name: "OFF" number: 0 } }
  }
  enum_type { name: "Kind" value { name: "NONE" number: 0 } }
}
enum_type { name: "Status" value { name: "OK" number: 0 } }
"""

FILE_2 = """\
name: "pw/two.proto"
package: "pw.test"
message_type { name: "Sibling" }
"""

FILE_3 = """\
name: "bare.proto"
message_type { name: "Bare" }
"""


def _proto_file(text: str) -> descriptor_pb2.FileDescriptorProto:
    return text_format.Parse(text, descriptor_pb2.FileDescriptorProto())


class TypeIndexTest(unittest.TestCase):
    """Tests resolving fully-qualified names across files."""

    def setUp(self):
        self._files = [
            _proto_file(FILE_1),
            _proto_file(FILE_2),
            _proto_file(FILE_3),
        ]
        self._index = TypeIndex.build(self._files)

    def test_find_message(self):
        outer = self._index.find_message('.pw.test.Outer')
        self.assertIsNotNone(outer)
        self.assertEqual('Outer', outer.name)

        inner = self._index.find_message('.pw.test.Outer.Inner')
        self.assertIsNotNone(inner)
        self.assertEqual('Inner', inner.name)

    def test_find_enum(self):
        self.assertEqual(
            'Status', self._index.find_enum('.pw.test.Status').name
        )
        self.assertEqual(
            'Kind', self._index.find_enum('.pw.test.Outer.Kind').name
        )
        self.assertEqual(
            'Mode', self._index.find_enum('.pw.test.Outer.Inner.Mode').name
        )

    def test_leading_dot_is_optional(self):
        self.assertIs(
            self._index.find_message('.pw.test.Outer'),
            self._index.find_message('pw.test.Outer'),
        )

    def test_files_share_package(self):
        self.assertEqual(
            'Sibling', self._index.find_message('.pw.test.Sibling').name
        )

    def test_file_without_package(self):
        self.assertEqual('Bare', self._index.find_message('.Bare').name)

    def test_missing(self):
        self.assertIsNone(self._index.find_message('.pw.test.Missing'))
        self.assertIsNone(self._index.find_enum('.pw.other.Status'))
        self.assertIsNone(self._index.find_message(''))
        self.assertIsNone(self._index.find_message('.'))

    def test_wrong_kind(self):
        self.assertIsNone(self._index.find_enum('.pw.test.Outer'))
        self.assertIsNone(self._index.find_message('.pw.test.Status'))
        self.assertIsNone(self._index.find_message('.pw.test'))

    def test_node_types(self):
        node = self._index.find_node('.pw.test.Outer.Inner')
        self.assertIs(IndexNode.Type.MESSAGE, node.type())
        self.assertIs(IndexNode.Type.MESSAGE, node.parent().type())
        self.assertIs(IndexNode.Type.PACKAGE, node.parent().parent().type())
        self.assertIs(
            IndexNode.Type.ENUM,
            self._index.find_node('.pw.test.Outer.Inner.Mode').type(),
        )

    def test_later_declaration_replaces_earlier(self):
        duplicate = _proto_file(
            """\
            name: "pw/three.proto"
            package: "pw.test"
            message_type { name: "Sibling" field { name: "x" number: 1 } }
            """
        )
        self._index.add_file(duplicate)
        sibling = self._index.find_message('.pw.test.Sibling')
        self.assertEqual(['x'], [field.name for field in sibling.field])


class IndexNodeTest(unittest.TestCase):
    """Tests the nesting rules of index nodes."""

    def test_enum_cannot_have_children(self):
        proto_enum = IndexNode('E', IndexNode.Type.ENUM)
        with self.assertRaises(ValueError):
            proto_enum.add_child(IndexNode('M', IndexNode.Type.MESSAGE))

    def test_message_cannot_hold_package(self):
        message = IndexNode('M', IndexNode.Type.MESSAGE)
        with self.assertRaises(ValueError):
            message.add_child(IndexNode('pkg', IndexNode.Type.PACKAGE))

    def test_reparenting_moves_child(self):
        first = IndexNode('a', IndexNode.Type.PACKAGE)
        second = IndexNode('b', IndexNode.Type.PACKAGE)
        child = IndexNode('C', IndexNode.Type.MESSAGE)

        first.add_child(child)
        second.add_child(child)

        self.assertIsNone(first.child('C'))
        self.assertIs(child, second.child('C'))
        self.assertIs(second, child.parent())


if __name__ == '__main__':
    unittest.main()
