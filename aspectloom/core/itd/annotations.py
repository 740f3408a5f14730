"""Annotation source rendering.

The composer treats annotation rendering as a pluggable collaborator
(any callable matching ``AnnotationRenderer``). ``to_source_form`` is the
default implementation for annotations whose attributes are literals,
class literals, enum constants, nested annotations or arrays of those.
"""

import math
from typing import Optional, Protocol

from .imports import ImportRegistrationResolver
from .models import AnnotationMetadata, AttributeValue, EnumValue, TypeReference


class AnnotationRenderer(Protocol):
    def __call__(
        self,
        annotation: AnnotationMetadata,
        resolver: Optional[ImportRegistrationResolver] = None,
    ) -> str:
        ...


_INT_MIN = -(2 ** 31)
_INT_MAX = 2 ** 31 - 1


_JAVA_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def to_source_form(
    annotation: AnnotationMetadata,
    resolver: Optional[ImportRegistrationResolver] = None,
) -> str:
    """Render an annotation as it appears in source, e.g. ``@Column(name = "id")``.

    Args:
        annotation: Annotation to render
        resolver: When given, type names are qualified through it and may
            register imports; otherwise they are printed fully qualified

    Returns:
        Source text beginning with ``@``
    """
    text = "@" + _type_name(annotation.annotation_type, resolver)
    attributes = annotation.attributes
    if not attributes:
        return text

    if len(attributes) == 1 and attributes[0].name == "value":
        return f"{text}({_value_source(attributes[0].value, resolver)})"

    rendered = ", ".join(
        f"{attribute.name} = {_value_source(attribute.value, resolver)}" for attribute in attributes
    )
    return f"{text}({rendered})"


def _type_name(java_type: TypeReference, resolver: Optional[ImportRegistrationResolver]) -> str:
    if resolver is None:
        return java_type.fully_qualified_name
    return resolver.resolve_name(java_type)


def _value_source(value: AttributeValue, resolver: Optional[ImportRegistrationResolver]) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return '"' + "".join(_JAVA_ESCAPES.get(ch, ch) for ch in value) + '"'
    if isinstance(value, int):
        if _INT_MIN <= value <= _INT_MAX:
            return str(int(value))
        return f"{int(value)}L"
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Non-finite annotation attribute value: {value!r}")
        return repr(value)
    if isinstance(value, TypeReference):
        return _type_name(value, resolver) + "[]" * value.array_dimensions + ".class"
    if isinstance(value, EnumValue):
        return f"{_type_name(value.enum_type, resolver)}.{value.constant}"
    if isinstance(value, AnnotationMetadata):
        return to_source_form(value, resolver)
    if isinstance(value, (list, tuple)):
        return "{" + ", ".join(_value_source(item, resolver) for item in value) + "}"
    raise ValueError(f"Unsupported annotation attribute value: {value!r}")
