"""AspectLoom ITD composer — inter-type declaration source generation.

Public API:
    ItdSourceFileComposer(spec) → .get_output() / .is_content()
    compose_itd(spec) → str
    ImportRegistrationResolver(home_package) — qualification decisions
    parse_type_reference(text) → TypeReference
"""

from typing import Optional

from .annotations import AnnotationRenderer, to_source_form
from .body import InvocableMemberBodyBuilder
from .builder import IntroductionSpecBuilder
from .composer import ItdSourceFileComposer
from .errors import InvariantViolation
from .imports import ImportRegistrationResolver
from .models import (
    AnnotatedType,
    AnnotationAttribute,
    AnnotationMetadata,
    ConstructorSpec,
    DataType,
    DeclaredFieldAnnotation,
    DeclaredMethodAnnotation,
    EnumValue,
    FieldSpec,
    IntroductionSpec,
    MethodSpec,
    TypeReference,
    Wildcard,
)
from .modifiers import Modifier
from .type_parser import parse_type_reference

__all__ = [
    "compose_itd",
    "ItdSourceFileComposer",
    "ImportRegistrationResolver",
    "IntroductionSpecBuilder",
    "InvocableMemberBodyBuilder",
    "InvariantViolation",
    "AnnotationRenderer",
    "to_source_form",
    "parse_type_reference",
    "AnnotatedType",
    "AnnotationAttribute",
    "AnnotationMetadata",
    "ConstructorSpec",
    "DataType",
    "DeclaredFieldAnnotation",
    "DeclaredMethodAnnotation",
    "EnumValue",
    "FieldSpec",
    "IntroductionSpec",
    "MethodSpec",
    "Modifier",
    "TypeReference",
    "Wildcard",
]


def compose_itd(spec: IntroductionSpec) -> Optional[str]:
    """Compose the ITD source for ``spec``.

    Args:
        spec: Members to introduce

    Returns:
        The ITD source, or None when the ITD would introduce nothing
    """
    composer = ItdSourceFileComposer(spec)
    if not composer.is_content():
        return None
    return composer.get_output()
