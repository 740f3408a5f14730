"""ITD data models.

Immutable description of the members an aspect introduces into a type.
These are pure data containers — no emission logic beyond rendering a
single type reference.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple, Union

if TYPE_CHECKING:
    from .imports import ImportRegistrationResolver


def _freeze(instance: Any, *names: str) -> None:
    """Replace sequence fields of a frozen dataclass with tuples."""
    for name in names:
        object.__setattr__(instance, name, tuple(getattr(instance, name)))


class DataType(Enum):
    """What a TypeReference names."""
    TYPE = "type"            # class, interface, enum or annotation type
    VARIABLE = "variable"    # type variable such as T
    PRIMITIVE = "primitive"  # int, boolean, void ...


class Wildcard(Enum):
    UNBOUNDED = "?"
    EXTENDS = "? extends "
    SUPER = "? super "


PRIMITIVE_NAMES = frozenset({
    "boolean", "byte", "char", "short", "int", "long", "float", "double", "void",
})


@dataclass(frozen=True)
class TypeReference:
    """A resolved Java type, optionally parameterized.

    The package is derived from the leading lower-case segments of the
    fully qualified name unless given explicitly, so ``com.acme.Outer.Inner``
    lives in ``com.acme`` and has the package-relative name ``Outer.Inner``.
    Instances sort by fully qualified name.
    """

    fully_qualified_name: str
    parameters: Tuple["TypeReference", ...] = ()
    array_dimensions: int = 0
    data_type: DataType = DataType.TYPE
    wildcard: Optional[Wildcard] = None
    package: Optional[str] = None

    def __post_init__(self):
        if not self.fully_qualified_name:
            raise ValueError("Fully qualified type name is required")
        if self.array_dimensions < 0:
            raise ValueError(f"Negative array dimensions for {self.fully_qualified_name}")
        _freeze(self, "parameters")

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def of(cls, fully_qualified_name: str, *parameters: "TypeReference") -> "TypeReference":
        return cls(fully_qualified_name, parameters=parameters)

    @classmethod
    def primitive(cls, name: str, array_dimensions: int = 0) -> "TypeReference":
        if name not in PRIMITIVE_NAMES:
            raise ValueError(f"Not a primitive type: {name}")
        return cls(name, array_dimensions=array_dimensions, data_type=DataType.PRIMITIVE, package="")

    @classmethod
    def variable(cls, name: str) -> "TypeReference":
        return cls(name, data_type=DataType.VARIABLE, package="")

    @classmethod
    def wildcard_of(cls, bound: Optional["TypeReference"] = None, extends: bool = True) -> "TypeReference":
        """Build ``?``, ``? extends bound`` or ``? super bound``."""
        if bound is None:
            return cls("java.lang.Object", wildcard=Wildcard.UNBOUNDED)
        return cls(
            bound.fully_qualified_name,
            parameters=bound.parameters,
            array_dimensions=bound.array_dimensions,
            data_type=bound.data_type,
            wildcard=Wildcard.EXTENDS if extends else Wildcard.SUPER,
            package=bound.package,
        )

    # -------------------------------------------------------------------------
    # Naming
    # -------------------------------------------------------------------------

    @property
    def simple_name(self) -> str:
        return self.fully_qualified_name.rsplit(".", 1)[-1]

    @property
    def package_name(self) -> str:
        if self.package is not None:
            return self.package
        if self.data_type is not DataType.TYPE:
            return ""
        package_segments: List[str] = []
        for segment in self.fully_qualified_name.split(".")[:-1]:
            if segment[:1].isupper():
                break
            package_segments.append(segment)
        return ".".join(package_segments)

    @property
    def relative_name(self) -> str:
        """Name relative to the package, e.g. ``Outer.Inner``."""
        package = self.package_name
        if package and self.fully_qualified_name.startswith(package + "."):
            return self.fully_qualified_name[len(package) + 1:]
        return self.fully_qualified_name

    @property
    def is_default_package(self) -> bool:
        return self.package_name == ""

    def raw(self) -> "TypeReference":
        """The bare type: no parameters, array dimensions or wildcard."""
        return TypeReference(self.fully_qualified_name, data_type=self.data_type, package=self.package)

    def type_variables(self) -> List[str]:
        """Distinct type variable names used by this reference, in order."""
        names: List[str] = []
        if self.wildcard is Wildcard.UNBOUNDED:
            return names
        if self.data_type is DataType.VARIABLE:
            names.append(self.simple_name)
        for parameter in self.parameters:
            for name in parameter.type_variables():
                if name not in names:
                    names.append(name)
        return names

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def name_including_type_parameters(
        self,
        static_form: bool = False,
        resolver: Optional["ImportRegistrationResolver"] = None,
    ) -> str:
        """Render this reference as Java source.

        Args:
            static_form: True when rendering the return type of a static
                member; type variables are then declared in front of it
            resolver: Decides per type whether the short name is usable,
                registering imports as it goes. None prints every type
                fully qualified.

        Returns:
            Source form such as ``List<Foo>`` or ``<T> java.util.List<T>``
        """
        name = self._render(resolver)
        if static_form:
            variables = self.type_variables()
            if variables:
                return f"<{', '.join(variables)}> {name}"
        return name

    def _render(self, resolver: Optional["ImportRegistrationResolver"]) -> str:
        if self.wildcard is Wildcard.UNBOUNDED:
            return "?"
        dimensions = "[]" * self.array_dimensions
        if self.data_type is DataType.PRIMITIVE:
            return self.fully_qualified_name + dimensions

        if resolver is not None:
            name = resolver.resolve_name(self)
        elif self.data_type is DataType.VARIABLE:
            name = self.simple_name
        else:
            name = self.fully_qualified_name

        if self.parameters:
            name += "<" + ", ".join(p._render(resolver) for p in self.parameters) + ">"
        name += dimensions

        if self.wildcard is not None:
            return self.wildcard.value + name
        return name

    def __lt__(self, other: "TypeReference") -> bool:
        if not isinstance(other, TypeReference):
            return NotImplemented
        return self.fully_qualified_name < other.fully_qualified_name

    def __str__(self) -> str:
        return self.name_including_type_parameters()


VOID = TypeReference.primitive("void")
BOOLEAN = TypeReference.primitive("boolean")
INT = TypeReference.primitive("int")
LONG = TypeReference.primitive("long")
OBJECT = TypeReference.of("java.lang.Object")
STRING = TypeReference.of("java.lang.String")


# =============================================================================
# Annotations
# =============================================================================


@dataclass(frozen=True)
class EnumValue:
    """An enum constant used as an annotation attribute value."""
    enum_type: TypeReference
    constant: str


# str | bool | int | float | TypeReference (class literal) | EnumValue |
# AnnotationMetadata | a sequence of those
AttributeValue = Any


@dataclass(frozen=True)
class AnnotationAttribute:
    name: str
    value: AttributeValue

    def __post_init__(self):
        if isinstance(self.value, list):
            object.__setattr__(self, "value", tuple(self.value))


@dataclass(frozen=True)
class AnnotationMetadata:
    """An annotation with a flat, ordered list of attributes."""
    annotation_type: TypeReference
    attributes: Tuple[AnnotationAttribute, ...] = ()

    def __post_init__(self):
        _freeze(self, "attributes")

    @classmethod
    def of(cls, annotation_type: TypeReference, **attributes: AttributeValue) -> "AnnotationMetadata":
        return cls(annotation_type, tuple(AnnotationAttribute(k, v) for k, v in attributes.items()))


@dataclass(frozen=True)
class AnnotatedType:
    """A parameter type together with the annotations placed on it."""
    java_type: TypeReference
    annotations: Tuple[AnnotationMetadata, ...] = ()

    def __post_init__(self):
        _freeze(self, "annotations")


# =============================================================================
# Members
# =============================================================================


@dataclass(frozen=True)
class FieldSpec:
    field_name: str
    field_type: TypeReference
    modifiers: int = 0
    initializer: Optional[str] = None
    annotations: Tuple[AnnotationMetadata, ...] = ()

    def __post_init__(self):
        _freeze(self, "annotations")


def _parameter_key(parameter: AnnotatedType) -> str:
    # Erasure plus dimensions: set(String) and set(String[]) are distinct overloads
    java_type = parameter.java_type
    return java_type.fully_qualified_name + "[]" * java_type.array_dimensions


@dataclass(frozen=True)
class ConstructorSpec:
    """A constructor introduced as ``Target.new(...)``.

    ``body`` is appended verbatim and is expected to carry its own
    indentation and trailing newline.
    """
    modifiers: int = 0
    parameter_types: Tuple[AnnotatedType, ...] = ()
    parameter_names: Tuple[str, ...] = ()
    annotations: Tuple[AnnotationMetadata, ...] = ()
    body: str = ""

    def __post_init__(self):
        _freeze(self, "parameter_types", "parameter_names", "annotations")

    def signature_key(self) -> Tuple[str, ...]:
        return tuple(_parameter_key(p) for p in self.parameter_types)


@dataclass(frozen=True)
class MethodSpec:
    method_name: str
    return_type: TypeReference
    modifiers: int = 0
    parameter_types: Tuple[AnnotatedType, ...] = ()
    parameter_names: Tuple[str, ...] = ()
    throws_types: Tuple[TypeReference, ...] = ()
    annotations: Tuple[AnnotationMetadata, ...] = ()
    body: str = ""

    def __post_init__(self):
        _freeze(self, "parameter_types", "parameter_names", "throws_types", "annotations")

    def signature_key(self) -> Tuple[str, ...]:
        return (self.method_name,) + tuple(_parameter_key(p) for p in self.parameter_types)


CallableSpec = Union[ConstructorSpec, MethodSpec]


@dataclass(frozen=True)
class DeclaredFieldAnnotation:
    """``declare @field`` — an annotation added to an existing field."""
    field: FieldSpec
    annotation: AnnotationMetadata


@dataclass(frozen=True)
class DeclaredMethodAnnotation:
    """``declare @method`` — an annotation added to an existing method."""
    method: MethodSpec
    annotation: AnnotationMetadata


# =============================================================================
# ITD unit
# =============================================================================


@dataclass(frozen=True)
class IntroductionSpec:
    """Everything one aspect introduces into one target type.

    The target and the aspect must live in the same package; the composer
    rejects the introduction otherwise.
    """

    introduction_target: TypeReference
    aspect_type: TypeReference
    privileged: bool = False
    preregistered_imports: Tuple[TypeReference, ...] = ()
    type_annotations: Tuple[AnnotationMetadata, ...] = ()
    field_annotations: Tuple[DeclaredFieldAnnotation, ...] = ()
    method_annotations: Tuple[DeclaredMethodAnnotation, ...] = ()
    extends_types: Tuple[TypeReference, ...] = ()
    implements_types: Tuple[TypeReference, ...] = ()
    fields: Tuple[FieldSpec, ...] = ()
    constructors: Tuple[ConstructorSpec, ...] = ()
    methods: Tuple[MethodSpec, ...] = ()

    def __post_init__(self):
        _freeze(
            self,
            "preregistered_imports",
            "type_annotations",
            "field_annotations",
            "method_annotations",
            "extends_types",
            "implements_types",
            "fields",
            "constructors",
            "methods",
        )


def annotated(java_type: TypeReference, *annotations: AnnotationMetadata) -> AnnotatedType:
    return AnnotatedType(java_type, annotations)


def parameters(*pairs: Tuple[TypeReference, str]) -> Tuple[Tuple[AnnotatedType, ...], Tuple[str, ...]]:
    """Split ``(type, name)`` pairs into the parallel lists callables expect."""
    types: Sequence[AnnotatedType] = tuple(AnnotatedType(t) for t, _ in pairs)
    names: Sequence[str] = tuple(n for _, n in pairs)
    return tuple(types), tuple(names)
