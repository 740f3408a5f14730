"""Java member modifiers.

Bit values match the JVM access flags so masks produced by other
tooling can be passed straight through.
"""

from enum import IntFlag
from typing import List


class Modifier(IntFlag):
    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010
    SYNCHRONIZED = 0x0020
    VOLATILE = 0x0040
    TRANSIENT = 0x0080
    NATIVE = 0x0100
    INTERFACE = 0x0200
    ABSTRACT = 0x0400
    STRICT = 0x0800


# Canonical keyword order used by javac and java.lang.reflect.Modifier
_KEYWORD_ORDER = (
    (Modifier.PUBLIC, "public"),
    (Modifier.PROTECTED, "protected"),
    (Modifier.PRIVATE, "private"),
    (Modifier.ABSTRACT, "abstract"),
    (Modifier.STATIC, "static"),
    (Modifier.FINAL, "final"),
    (Modifier.TRANSIENT, "transient"),
    (Modifier.VOLATILE, "volatile"),
    (Modifier.SYNCHRONIZED, "synchronized"),
    (Modifier.NATIVE, "native"),
    (Modifier.STRICT, "strictfp"),
    (Modifier.INTERFACE, "interface"),
)


def to_source(modifiers: int) -> str:
    """Render a modifier mask as space-separated keywords.

    Args:
        modifiers: Bit mask of Modifier flags (0 for package-private)

    Returns:
        Keywords in canonical order, or "" when no flag is set
    """
    keywords: List[str] = []
    for flag, keyword in _KEYWORD_ORDER:
        if modifiers & flag:
            keywords.append(keyword)
    return " ".join(keywords)


def is_static(modifiers: int) -> bool:
    return bool(modifiers & Modifier.STATIC)
