"""Emission phases of an ITD compilation unit.

Each phase appends one structural section to the shared buffer, threads
the resolver through every type reference it writes, and returns whether
it emitted any content. Phases never read back text already written.
"""

from typing import Sequence

from .annotations import AnnotationRenderer
from .buffer import EmissionBuffer
from .errors import require
from .imports import ImportRegistrationResolver
from .models import (
    AnnotatedType,
    AnnotationMetadata,
    CallableSpec,
    ConstructorSpec,
    DeclaredFieldAnnotation,
    DeclaredMethodAnnotation,
    FieldSpec,
    IntroductionSpec,
    MethodSpec,
    TypeReference,
)
from .modifiers import is_static, to_source


# =============================================================================
# Declaration header and terminator
# =============================================================================


def append_type_declaration(buffer: EmissionBuffer, spec: IntroductionSpec) -> None:
    """Write ``[privileged ]aspect Name {`` and open the body."""
    target = spec.introduction_target
    aspect = spec.aspect_type
    require(
        target.package_name == aspect.package_name,
        f"Aspect and introduction must be in identical packages "
        f"({aspect.fully_qualified_name} vs {target.fully_qualified_name})",
    )

    buffer.append_indent()
    if spec.privileged:
        buffer.append("privileged ")
    buffer.append(f"aspect {aspect.simple_name} {{")
    buffer.new_line(indent=False)
    buffer.indent()
    buffer.new_line()


def append_terminator(buffer: EmissionBuffer) -> None:
    require(
        buffer.indent_depth == 1,
        f"Indent level must be 1 (not {buffer.indent_depth}) to conclude!",
    )
    buffer.dedent()
    buffer.append_formal_line("}")


# =============================================================================
# declare parents / declare @type / @field / @method
# =============================================================================


def append_parents(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    target: TypeReference,
    keyword: str,
    types: Sequence[TypeReference],
) -> bool:
    """Write one ``declare parents: Target <keyword> Type;`` per type.

    A type that cannot be imported is printed fully qualified together
    with its type arguments.
    """
    for parent in types:
        if resolver.is_fully_qualified_form_required_after_auto_import(parent):
            name = parent.name_including_type_parameters()
        else:
            name = parent.name_including_type_parameters(False, resolver)
        buffer.append_indent()
        buffer.append(f"declare parents: {target.simple_name} {keyword} {name};")
        buffer.new_line(indent=False)
        buffer.new_line()
    return bool(types)


def append_type_annotations(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    target: TypeReference,
    annotations: Sequence[AnnotationMetadata],
    render: AnnotationRenderer,
) -> bool:
    for annotation in annotations:
        buffer.append_indent()
        buffer.append(f"declare @type: {target.simple_name}: ")
        buffer.append(render(annotation, resolver))
        buffer.append(";")
        buffer.new_line(indent=False)
        buffer.new_line()
    return bool(annotations)


def append_field_annotations(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    target: TypeReference,
    declarations: Sequence[DeclaredFieldAnnotation],
    render: AnnotationRenderer,
) -> bool:
    for declaration in declarations:
        buffer.append_indent()
        buffer.append(f"declare @field: * {target.simple_name}.{declaration.field.field_name}: ")
        buffer.append(render(declaration.annotation, resolver))
        buffer.append(";")
        buffer.new_line(indent=False)
        buffer.new_line()
    return bool(declarations)


def append_method_annotations(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    target: TypeReference,
    declarations: Sequence[DeclaredMethodAnnotation],
    render: AnnotationRenderer,
) -> bool:
    """Write ``declare @method`` lines.

    The return type is matched by its fully qualified name; parameter
    types go through the resolver and are joined without spaces.
    """
    for declaration in declarations:
        method = declaration.method
        parameter_types = ",".join(
            p.java_type.name_including_type_parameters(False, resolver) for p in method.parameter_types
        )
        buffer.append_indent()
        buffer.append("declare @method: ")
        _append_modifiers(buffer, method.modifiers)
        buffer.append(method.return_type.name_including_type_parameters())
        buffer.append(f" {target.simple_name}.{method.method_name}({parameter_types}): ")
        buffer.append(render(declaration.annotation, resolver))
        buffer.append(";")
        buffer.new_line(indent=False)
        buffer.new_line()
    return bool(declarations)


# =============================================================================
# Members
# =============================================================================


def append_fields(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    target: TypeReference,
    fields: Sequence[FieldSpec],
    render: AnnotationRenderer,
) -> bool:
    for field_spec in fields:
        _append_annotation_lines(buffer, resolver, field_spec.annotations, render)

        buffer.append_indent()
        _append_modifiers(buffer, field_spec.modifiers)
        buffer.append(field_spec.field_type.name_including_type_parameters(False, resolver))
        buffer.append(f" {target.simple_name}.{field_spec.field_name}")
        if field_spec.initializer is not None:
            buffer.append(" = ")
            buffer.append(field_spec.initializer)
        buffer.append(";")
        buffer.new_line(indent=False)
        buffer.new_line()
    return bool(fields)


def append_constructors(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    target: TypeReference,
    constructors: Sequence[ConstructorSpec],
    render: AnnotationRenderer,
) -> bool:
    for constructor in constructors:
        _check_parameters(constructor, f"{target.simple_name}.new")
        _append_annotation_lines(buffer, resolver, constructor.annotations, render)

        buffer.append_indent()
        _append_modifiers(buffer, constructor.modifiers)
        buffer.append(f"{target.simple_name}.new")
        _append_parameters(buffer, resolver, constructor, render)
        buffer.append(" {")
        _append_body(buffer, constructor.body)
    return bool(constructors)


def append_methods(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    target: TypeReference,
    methods: Sequence[MethodSpec],
    render: AnnotationRenderer,
) -> bool:
    for method in methods:
        _check_parameters(method, f"{target.simple_name}.{method.method_name}")
        _append_annotation_lines(buffer, resolver, method.annotations, render)

        buffer.append_indent()
        _append_modifiers(buffer, method.modifiers)
        buffer.append(method.return_type.name_including_type_parameters(is_static(method.modifiers), resolver))
        buffer.append(f" {target.simple_name}.{method.method_name}")
        _append_parameters(buffer, resolver, method, render)
        if method.throws_types:
            buffer.append(" throws ")
            buffer.append(", ".join(
                t.name_including_type_parameters(False, resolver) for t in method.throws_types
            ))
        buffer.append(" {")
        _append_body(buffer, method.body)
    return bool(methods)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _check_parameters(member: CallableSpec, description: str) -> None:
    require(
        len(member.parameter_types) == len(member.parameter_names),
        f"Mismatched parameter names against parameter types in {description} "
        f"({len(member.parameter_names)} names, {len(member.parameter_types)} types)",
    )


def _append_modifiers(buffer: EmissionBuffer, modifiers: int) -> None:
    keywords = to_source(modifiers)
    if keywords:
        buffer.append(keywords + " ")


def _append_annotation_lines(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    annotations: Sequence[AnnotationMetadata],
    render: AnnotationRenderer,
) -> None:
    for annotation in annotations:
        buffer.append_formal_line(render(annotation, resolver))


def _append_parameters(
    buffer: EmissionBuffer,
    resolver: ImportRegistrationResolver,
    member: CallableSpec,
    render: AnnotationRenderer,
) -> None:
    rendered = []
    for parameter_type, parameter_name in zip(member.parameter_types, member.parameter_names):
        rendered.append(_parameter_source(resolver, parameter_type, parameter_name, render))
    buffer.append("(" + ", ".join(rendered) + ")")


def _parameter_source(
    resolver: ImportRegistrationResolver,
    parameter_type: AnnotatedType,
    parameter_name: str,
    render: AnnotationRenderer,
) -> str:
    parts = [render(annotation, resolver) for annotation in parameter_type.annotations]
    parts.append(parameter_type.java_type.name_including_type_parameters(False, resolver))
    parts.append(parameter_name)
    return " ".join(parts)


def _append_body(buffer: EmissionBuffer, body: str) -> None:
    """Finish the signature line, append the body verbatim and close it."""
    buffer.new_line(indent=False)
    buffer.indent()
    buffer.append(body)
    buffer.dedent()
    buffer.append_formal_line("}")
    buffer.new_line()
