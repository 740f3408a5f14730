"""Append-only text buffer with indentation tracking."""

from typing import List

from .errors import require


class EmissionBuffer:
    """Accumulates emitted source text.

    Every line-level helper writes ``indent_depth`` copies of the indent
    unit first. The buffer knows nothing about whether the text it holds
    is meaningful content; phases track that themselves.
    """

    def __init__(self, indent_unit: str = "    ", newline: str = "\n", indent_blank_lines: bool = True):
        self.indent_unit = indent_unit
        self.newline = newline
        self.indent_blank_lines = indent_blank_lines
        self.indent_depth = 0
        self._parts: List[str] = []

    def indent(self) -> "EmissionBuffer":
        self.indent_depth += 1
        return self

    def dedent(self) -> "EmissionBuffer":
        require(self.indent_depth > 0, "Cannot dedent below column zero")
        self.indent_depth -= 1
        return self

    def append(self, text: str) -> "EmissionBuffer":
        """Append ``text`` as-is, WITHOUT indentation."""
        if text:
            self._parts.append(text)
        return self

    def append_indent(self) -> "EmissionBuffer":
        if self.indent_depth:
            self._parts.append(self.indent_unit * self.indent_depth)
        return self

    def append_formal_line(self, text: str) -> "EmissionBuffer":
        """Append indent, ``text`` and a newline. The most common primitive."""
        self.append_indent()
        self.append(text)
        return self.new_line(indent=False)

    def new_line(self, indent: bool = True) -> "EmissionBuffer":
        """Terminate the current line, or write a blank line.

        With ``indent`` the line first receives the current indentation
        (unless blank-line indentation is switched off in settings).
        """
        if indent and self.indent_blank_lines:
            self.append_indent()
        self._parts.append(self.newline)
        return self

    def getvalue(self) -> str:
        return "".join(self._parts)
