"""Builder for constructor and method body text."""

from typing import Optional

from ...setting import ComposerSettings, get_settings
from .buffer import EmissionBuffer

# aspect body (1) + member body (1)
MEMBER_BODY_DEPTH = 2


class InvocableMemberBodyBuilder:
    """Accumulates statement lines already indented for an ITD member body.

    The composer appends bodies verbatim, so lines produced here start at
    the depth the composer uses inside a constructor or method.

    Example::

        body = InvocableMemberBodyBuilder()
        body.append_formal_line("if (this.id == null) {")
        body.indent().append_formal_line("return 0;").indent_remove()
        body.append_formal_line("}")
        method = MethodSpec("hash", INT, body=body.get_output())
    """

    def __init__(self, settings: Optional[ComposerSettings] = None):
        if settings is None:
            settings = get_settings()
        self._buffer = EmissionBuffer(
            indent_unit=settings.indent_unit,
            newline=settings.newline,
            indent_blank_lines=settings.indent_blank_lines,
        )
        for _ in range(MEMBER_BODY_DEPTH):
            self._buffer.indent()

    def indent(self) -> "InvocableMemberBodyBuilder":
        self._buffer.indent()
        return self

    def indent_remove(self) -> "InvocableMemberBodyBuilder":
        if self._buffer.indent_depth <= MEMBER_BODY_DEPTH:
            raise ValueError("Cannot remove indentation below the member body level")
        self._buffer.dedent()
        return self

    def append_formal_line(self, line: str) -> "InvocableMemberBodyBuilder":
        self._buffer.append_formal_line(line)
        return self

    def new_line(self) -> "InvocableMemberBodyBuilder":
        self._buffer.new_line()
        return self

    def get_output(self) -> str:
        return self._buffer.getvalue()
