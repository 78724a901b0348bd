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
"""Defines the OutputFile class used to build generated source files."""


class OutputFile:
    """A buffer to which data is written.

    Example:

    ```
    output = OutputFile("hello.cs")
    output.write_line('class Hello')
    output.write_line('{')
    with output.indent():
        output.write('public int Value')
        output.write_line(' { get; set; }')
    output.write_line('}')

    print(output.content())
    ```

    Produces:
    ```
    class Hello
    {
        public int Value { get; set; }
    }
    ```
    """

    INDENT_WIDTH = 4

    def __init__(self, filename: str):
        self._filename: str = filename
        self._content: list[str] = []
        self._indentation: int = 0
        self._at_line_start: bool = True

    def write(self, text: str) -> None:
        """Appends text to the current line without ending it."""
        if not text:
            return

        if self._at_line_start:
            self._content.append(' ' * self._indentation)
            self._at_line_start = False

        self._content.append(text)

    def write_line(self, line: str = '') -> None:
        self.write(line)
        self._content.append('\n')
        self._at_line_start = True

    def indent(self) -> 'OutputFile._IndentationContext':
        """Increases the indentation level of the output."""
        return self._IndentationContext(self)

    def push_indent(self) -> None:
        self._indentation += self.INDENT_WIDTH

    def pop_indent(self) -> None:
        if self._indentation < self.INDENT_WIDTH:
            raise ValueError('Output indentation is already at zero')
        self._indentation -= self.INDENT_WIDTH

    def name(self) -> str:
        return self._filename

    def content(self) -> str:
        return ''.join(self._content)

    class _IndentationContext:
        """Context that increases the output's indentation when it is active."""

        def __init__(self, output: 'OutputFile'):
            self._output = output

        def __enter__(self):
            self._output.push_indent()

        def __exit__(self, typ, value, traceback):
            self._output.pop_indent()
