"""Incremental construction of an IntroductionSpec.

Metadata providers add members one at a time; the builder rejects
duplicates that would make the emitted ITD fail to compile.
"""

import logging
from typing import Dict, List, Tuple

from .models import (
    AnnotationMetadata,
    ConstructorSpec,
    DeclaredFieldAnnotation,
    DeclaredMethodAnnotation,
    FieldSpec,
    IntroductionSpec,
    MethodSpec,
    TypeReference,
)

logger = logging.getLogger(__name__)


class IntroductionSpecBuilder:
    """Mutable accumulator for the members of one ITD."""

    def __init__(self, introduction_target: TypeReference, aspect_type: TypeReference, privileged: bool = False):
        self.introduction_target = introduction_target
        self.aspect_type = aspect_type
        self.privileged = privileged

        self._imports: Dict[str, TypeReference] = {}
        self._type_annotations: List[AnnotationMetadata] = []
        self._field_annotations: List[DeclaredFieldAnnotation] = []
        self._method_annotations: List[DeclaredMethodAnnotation] = []
        self._extends_types: List[TypeReference] = []
        self._implements_types: List[TypeReference] = []
        self._fields: Dict[str, FieldSpec] = {}
        self._constructors: Dict[Tuple[str, ...], ConstructorSpec] = {}
        self._methods: Dict[Tuple[str, ...], MethodSpec] = {}

    # ── Members ──────────────────────────────────────────────────────

    def add_field(self, field_spec: FieldSpec) -> "IntroductionSpecBuilder":
        if field_spec.field_name in self._fields:
            raise ValueError(
                f"Field '{field_spec.field_name}' already introduced into "
                f"{self.introduction_target.fully_qualified_name}"
            )
        self._fields[field_spec.field_name] = field_spec
        return self

    def add_constructor(self, constructor: ConstructorSpec) -> "IntroductionSpecBuilder":
        key = constructor.signature_key()
        if key in self._constructors:
            raise ValueError(f"Constructor ({', '.join(key)}) already introduced")
        self._constructors[key] = constructor
        return self

    def add_method(self, method: MethodSpec) -> "IntroductionSpecBuilder":
        key = method.signature_key()
        if key in self._methods:
            raise ValueError(f"Method {key[0]}({', '.join(key[1:])}) already introduced")
        self._methods[key] = method
        return self

    # ── Supertypes ───────────────────────────────────────────────────

    def add_extends_type(self, java_type: TypeReference) -> "IntroductionSpecBuilder":
        _add_unique(self._extends_types, java_type, "extends")
        return self

    def add_implements_type(self, java_type: TypeReference) -> "IntroductionSpecBuilder":
        _add_unique(self._implements_types, java_type, "implements")
        return self

    # ── Annotations & imports ────────────────────────────────────────

    def add_type_annotation(self, annotation: AnnotationMetadata) -> "IntroductionSpecBuilder":
        self._type_annotations.append(annotation)
        return self

    def add_field_annotation(self, declaration: DeclaredFieldAnnotation) -> "IntroductionSpecBuilder":
        self._field_annotations.append(declaration)
        return self

    def add_method_annotation(self, declaration: DeclaredMethodAnnotation) -> "IntroductionSpecBuilder":
        self._method_annotations.append(declaration)
        return self

    def add_import(self, java_type: TypeReference) -> "IntroductionSpecBuilder":
        self._imports.setdefault(java_type.fully_qualified_name, java_type)
        return self

    def build(self) -> IntroductionSpec:
        spec = IntroductionSpec(
            introduction_target=self.introduction_target,
            aspect_type=self.aspect_type,
            privileged=self.privileged,
            preregistered_imports=tuple(self._imports.values()),
            type_annotations=tuple(self._type_annotations),
            field_annotations=tuple(self._field_annotations),
            method_annotations=tuple(self._method_annotations),
            extends_types=tuple(self._extends_types),
            implements_types=tuple(self._implements_types),
            fields=tuple(self._fields.values()),
            constructors=tuple(self._constructors.values()),
            methods=tuple(self._methods.values()),
        )
        logger.debug(
            f"Built introduction spec for {self.aspect_type.fully_qualified_name}: "
            f"{len(spec.fields)} fields, {len(spec.constructors)} constructors, {len(spec.methods)} methods"
        )
        return spec


def _add_unique(types: List[TypeReference], java_type: TypeReference, keyword: str) -> None:
    if any(t.fully_qualified_name == java_type.fully_qualified_name for t in types):
        raise ValueError(f"Duplicate '{keyword}' type {java_type.fully_qualified_name}")
    types.append(java_type)
