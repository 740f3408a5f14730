"""Tests for the ITD source composer.

Tests cover:
- Reference outputs for empty and single-field ITDs
- Every emission phase (parents, declare @type/@field/@method, members)
- Header construction (package line, sorted imports)
- Qualification and collision handling
- Content flag semantics
- Fatal contract violations
"""

import pytest

from aspectloom.core.itd import (
    AnnotatedType,
    AnnotationMetadata,
    ConstructorSpec,
    DeclaredFieldAnnotation,
    DeclaredMethodAnnotation,
    EnumValue,
    FieldSpec,
    IntroductionSpec,
    InvariantViolation,
    ItdSourceFileComposer,
    MethodSpec,
    Modifier,
    TypeReference,
    compose_itd,
)
from aspectloom.core.itd import phases
from aspectloom.core.itd.buffer import EmissionBuffer
from aspectloom.core.itd.models import STRING, VOID, annotated
from aspectloom.setting import ComposerSettings


# =========================================================================
# Fixtures
# =========================================================================

TARGET = TypeReference.of("com.acme.Widget")
ASPECT = TypeReference.of("com.acme.Widget_Roo_Jpa")
SETTINGS = ComposerSettings()

LONG_OBJ = TypeReference.of("java.lang.Long")
DATE = TypeReference.of("java.util.Date")
ENTITY = TypeReference.of("javax.persistence.Entity")
NOT_NULL = TypeReference.of("javax.validation.constraints.NotNull")


def _compose(settings: ComposerSettings = SETTINGS, **members) -> ItdSourceFileComposer:
    return ItdSourceFileComposer(IntroductionSpec(TARGET, ASPECT, **members), settings=settings)


def _body(output: str) -> str:
    """Strip everything up to and including the aspect declaration line."""
    return output.split("aspect Widget_Roo_Jpa {\n", 1)[1]


# =========================================================================
# Tests: Reference outputs
# =========================================================================

class TestReferenceOutputs:
    def test_empty_itd(self):
        composer = _compose()
        assert composer.get_output() == (
            "package com.acme;\n"
            "\n"
            "aspect Widget_Roo_Jpa {\n"
            "    \n"
            "}\n"
        )
        assert composer.is_content() is False

    def test_single_field(self):
        composer = _compose(fields=[FieldSpec("id", LONG_OBJ, Modifier.PRIVATE)])
        assert composer.get_output() == (
            "package com.acme;\n"
            "\n"
            "aspect Widget_Roo_Jpa {\n"
            "    \n"
            "    private Long Widget.id;\n"
            "    \n"
            "}\n"
        )
        assert composer.is_content() is True

    def test_privileged_aspect(self):
        spec = IntroductionSpec(TARGET, ASPECT, privileged=True)
        output = ItdSourceFileComposer(spec, settings=SETTINGS).get_output()
        assert "privileged aspect Widget_Roo_Jpa {\n" in output

    def test_default_package_has_no_package_line(self):
        spec = IntroductionSpec(TypeReference.of("Widget"), TypeReference.of("Widget_Roo_Jpa"))
        output = ItdSourceFileComposer(spec, settings=SETTINGS).get_output()
        assert output == "aspect Widget_Roo_Jpa {\n    \n}\n"

    def test_deterministic(self):
        members = dict(
            fields=[FieldSpec("created", DATE, Modifier.PRIVATE)],
            implements_types=[TypeReference.of("java.io.Serializable")],
        )
        assert _compose(**members).get_output() == _compose(**members).get_output()


# =========================================================================
# Tests: Supertypes and annotation declarations
# =========================================================================

class TestDeclarations:
    def test_extends_and_implements(self):
        output = _compose(
            extends_types=[TypeReference.of("com.acme.base.AbstractEntity")],
            implements_types=[TypeReference.of("java.io.Serializable")],
        ).get_output()

        assert "import com.acme.base.AbstractEntity;\nimport java.io.Serializable;\n\n" in output
        assert _body(output) == (
            "    \n"
            "    declare parents: Widget extends AbstractEntity;\n"
            "    \n"
            "    declare parents: Widget implements Serializable;\n"
            "    \n"
            "}\n"
        )

    def test_extends_precedes_implements(self):
        output = _compose(
            implements_types=[TypeReference.of("java.io.Serializable")],
            extends_types=[TypeReference.of("com.acme.base.AbstractEntity")],
        ).get_output()
        assert output.index(" extends ") < output.index(" implements ")

    def test_unimportable_parent_printed_fully_qualified_with_arguments(self):
        output = _compose(
            preregistered_imports=[TypeReference.of("com.other.Repository")],
            implements_types=[
                TypeReference.of("org.springframework.data.Repository", DATE),
            ],
        ).get_output()

        assert (
            "    declare parents: Widget implements "
            "org.springframework.data.Repository<java.util.Date>;\n"
        ) in output
        # type arguments of a fully qualified parent are not imported
        assert "import java.util.Date;" not in output
        assert "import com.other.Repository;" in output

    def test_type_annotation(self):
        output = _compose(type_annotations=[AnnotationMetadata.of(ENTITY)]).get_output()
        assert "import javax.persistence.Entity;\n" in output
        assert "    declare @type: Widget: @Entity;\n    \n" in output

    def test_field_annotation(self):
        declaration = DeclaredFieldAnnotation(FieldSpec("name", STRING), AnnotationMetadata.of(NOT_NULL))
        output = _compose(field_annotations=[declaration]).get_output()
        assert "    declare @field: * Widget.name: @NotNull;\n    \n" in output

    def test_method_annotation(self):
        method = MethodSpec(
            "getName",
            STRING,
            Modifier.PUBLIC,
            parameter_types=(AnnotatedType(STRING), AnnotatedType(TypeReference.of("java.util.Locale"))),
            parameter_names=("prefix", "locale"),
        )
        transactional = TypeReference.of("org.springframework.transaction.annotation.Transactional")
        output = _compose(
            method_annotations=[DeclaredMethodAnnotation(method, AnnotationMetadata.of(transactional))]
        ).get_output()

        assert (
            "    declare @method: public java.lang.String Widget.getName(String,Locale): @Transactional;\n"
        ) in output
        assert "import java.util.Locale;\n" in output

    def test_method_annotation_without_modifiers(self):
        method = MethodSpec("clear", VOID)
        output = _compose(
            method_annotations=[DeclaredMethodAnnotation(method, AnnotationMetadata.of(ENTITY))]
        ).get_output()
        assert "    declare @method: void Widget.clear(): @Entity;\n" in output

    def test_section_order(self):
        field = FieldSpec("name", STRING)
        method = MethodSpec("getName", STRING, Modifier.PUBLIC, body="        return name;\n")
        output = _compose(
            methods=[method],
            constructors=[ConstructorSpec(Modifier.PUBLIC)],
            fields=[field],
            method_annotations=[DeclaredMethodAnnotation(method, AnnotationMetadata.of(ENTITY))],
            field_annotations=[DeclaredFieldAnnotation(field, AnnotationMetadata.of(NOT_NULL))],
            type_annotations=[AnnotationMetadata.of(ENTITY)],
            implements_types=[TypeReference.of("java.io.Serializable")],
            extends_types=[TypeReference.of("com.acme.base.AbstractEntity")],
        ).get_output()

        markers = [
            "declare parents: Widget extends",
            "declare parents: Widget implements",
            "declare @type:",
            "declare @field:",
            "declare @method:",
            "Widget.name;",
            "Widget.new(",
            "String Widget.getName() {",
        ]
        positions = [output.index(marker) for marker in markers]
        assert positions == sorted(positions)


# =========================================================================
# Tests: Fields, constructors, methods
# =========================================================================

class TestMembers:
    def test_field_with_initializer_and_annotations(self):
        temporal = AnnotationMetadata.of(
            TypeReference.of("javax.persistence.Temporal"),
            value=EnumValue(TypeReference.of("javax.persistence.TemporalType"), "TIMESTAMP"),
        )
        field = FieldSpec(
            "created",
            DATE,
            Modifier.PRIVATE,
            initializer="new Date()",
            annotations=(AnnotationMetadata.of(NOT_NULL), temporal),
        )
        output = _compose(fields=[field]).get_output()

        assert output == (
            "package com.acme;\n"
            "\n"
            "import java.util.Date;\n"
            "import javax.persistence.Temporal;\n"
            "import javax.persistence.TemporalType;\n"
            "import javax.validation.constraints.NotNull;\n"
            "\n"
            "aspect Widget_Roo_Jpa {\n"
            "    \n"
            "    @NotNull\n"
            "    @Temporal(TemporalType.TIMESTAMP)\n"
            "    private Date Widget.created = new Date();\n"
            "    \n"
            "}\n"
        )

    def test_package_private_field_has_no_modifier_prefix(self):
        output = _compose(fields=[FieldSpec("count", TypeReference.primitive("int"))]).get_output()
        assert "    int Widget.count;\n" in output

    def test_constructor(self):
        constructor = ConstructorSpec(
            Modifier.PUBLIC,
            parameter_types=(annotated(STRING, AnnotationMetadata.of(NOT_NULL)),),
            parameter_names=("name",),
            body="        this.name = name;\n",
        )
        output = _compose(constructors=[constructor]).get_output()

        assert _body(output) == (
            "    \n"
            "    public Widget.new(@NotNull String name) {\n"
            "        this.name = name;\n"
            "    }\n"
            "    \n"
            "}\n"
        )
        # constructor parameter annotations register imports like method ones
        assert "import javax.validation.constraints.NotNull;\n" in output

    def test_method(self):
        method = MethodSpec(
            "getId",
            LONG_OBJ,
            Modifier.PUBLIC,
            body="        return this.id;\n",
        )
        assert _body(_compose(methods=[method]).get_output()) == (
            "    \n"
            "    public Long Widget.getId() {\n"
            "        return this.id;\n"
            "    }\n"
            "    \n"
            "}\n"
        )

    def test_method_parameters_annotations_and_throws(self):
        method = MethodSpec(
            "persist",
            VOID,
            Modifier.PUBLIC,
            parameter_types=(
                AnnotatedType(TypeReference.of("javax.persistence.EntityManager")),
                annotated(TypeReference.primitive("boolean"), AnnotationMetadata.of(NOT_NULL)),
            ),
            parameter_names=("em", "flush"),
            throws_types=(TypeReference.of("java.io.IOException"), TypeReference.of("java.sql.SQLException")),
            annotations=(AnnotationMetadata.of(TypeReference.of("org.springframework.transaction.annotation.Transactional")),),
            body="        em.persist(this);\n",
        )
        output = _compose(methods=[method]).get_output()

        assert (
            "    @Transactional\n"
            "    public void Widget.persist(EntityManager em, @NotNull boolean flush) "
            "throws IOException, SQLException {\n"
            "        em.persist(this);\n"
            "    }\n"
        ) in output
        assert (
            "import java.io.IOException;\n"
            "import java.sql.SQLException;\n"
            "import javax.persistence.EntityManager;\n"
            "import javax.validation.constraints.NotNull;\n"
            "import org.springframework.transaction.annotation.Transactional;\n"
        ) in output

    def test_static_generic_method_declares_type_variables(self):
        method = MethodSpec(
            "findAll",
            TypeReference.of("java.util.List", TypeReference.variable("T")),
            Modifier.PUBLIC | Modifier.STATIC,
            body="        return null;\n",
        )
        output = _compose(methods=[method]).get_output()
        assert "    public static <T> List<T> Widget.findAll() {\n" in output

    def test_instance_generic_method_uses_plain_return_type(self):
        method = MethodSpec(
            "all",
            TypeReference.of("java.util.List", TypeReference.variable("T")),
            Modifier.PUBLIC,
        )
        output = _compose(methods=[method]).get_output()
        assert "    public List<T> Widget.all() {\n" in output


# =========================================================================
# Tests: Header and qualification
# =========================================================================

class TestImports:
    def test_imports_sorted_regardless_of_member_order(self):
        fields = [
            FieldSpec("z", TypeReference.of("zeta.Zed")),
            FieldSpec("a", TypeReference.of("alpha.Alpha")),
            FieldSpec("m", TypeReference.of("mu.Mid")),
        ]
        output = _compose(fields=fields).get_output()
        assert output.startswith(
            "package com.acme;\n\nimport alpha.Alpha;\nimport mu.Mid;\nimport zeta.Zed;\n\naspect"
        )

    def test_home_package_type_short_and_not_imported(self):
        composer = _compose(
            preregistered_imports=[TypeReference.of("com.acme.Gadget")],
            fields=[FieldSpec("gadget", TypeReference.of("com.acme.Gadget"))],
        )
        output = composer.get_output()
        assert "import" not in output
        assert "    Gadget Widget.gadget;\n" in output

    def test_preregistered_imports_are_emitted(self):
        output = _compose(preregistered_imports=[TypeReference.of("java.util.List")]).get_output()
        assert "import java.util.List;\n\n" in output

    def test_colliding_simple_name_is_fully_qualified(self):
        output = _compose(
            fields=[
                FieldSpec("created", DATE),
                FieldSpec("sqlDate", TypeReference.of("java.sql.Date")),
            ]
        ).get_output()
        assert "    Date Widget.created;\n" in output
        assert "    java.sql.Date Widget.sqlDate;\n" in output
        assert "import java.sql.Date;" not in output

    def test_type_named_like_target_is_fully_qualified(self):
        output = _compose(fields=[FieldSpec("other", TypeReference.of("com.other.Widget"))]).get_output()
        assert "    com.other.Widget Widget.other;\n" in output
        assert "import com.other.Widget;" not in output

    def test_nested_type_of_target_is_short(self):
        output = _compose(
            fields=[FieldSpec("status", TypeReference.of("com.acme.Widget.Status"), Modifier.PRIVATE)]
        ).get_output()
        assert "    private Widget.Status Widget.status;\n" in output
        assert "import" not in output

    def test_outer_and_nested_home_types_are_short(self):
        output = _compose(
            fields=[
                FieldSpec("a", TypeReference.of("com.acme.Outer")),
                FieldSpec("b", TypeReference.of("com.acme.Outer.Inner")),
            ]
        ).get_output()
        assert "    Outer Widget.a;\n" in output
        assert "    Outer.Inner Widget.b;\n" in output

    def test_import_discovered_late_lands_in_header(self):
        methods = [
            MethodSpec(f"m{i}", VOID, Modifier.PUBLIC) for i in range(4)
        ] + [MethodSpec("last", TypeReference.of("java.math.BigDecimal"), Modifier.PUBLIC)]
        output = _compose(methods=methods).get_output()
        assert output.index("import java.math.BigDecimal;") < output.index("Widget.m0(")


# =========================================================================
# Tests: Content flag
# =========================================================================

class TestContentFlag:
    def test_shell_only_is_not_content(self):
        composer = _compose()
        assert composer.get_output()
        assert composer.is_content() is False

    @pytest.mark.parametrize(
        "members",
        [
            {"extends_types": [TypeReference.of("com.acme.base.AbstractEntity")]},
            {"type_annotations": [AnnotationMetadata.of(ENTITY)]},
            {"constructors": [ConstructorSpec(Modifier.PUBLIC)]},
            {"methods": [MethodSpec("touch", VOID)]},
        ],
    )
    def test_any_section_is_content(self, members):
        assert _compose(**members).is_content() is True

    def test_preregistered_imports_alone_are_not_content(self):
        composer = _compose(preregistered_imports=[TypeReference.of("java.util.List")])
        assert composer.is_content() is False

    def test_compose_itd_discards_empty(self):
        assert compose_itd(IntroductionSpec(TARGET, ASPECT)) is None


# =========================================================================
# Tests: Layout settings and renderer injection
# =========================================================================

class TestLayout:
    def test_unindented_blank_lines(self):
        settings = ComposerSettings(indent_blank_lines=False)
        output = _compose(settings=settings, fields=[FieldSpec("id", LONG_OBJ, Modifier.PRIVATE)]).get_output()
        assert _body(output) == "\n    private Long Widget.id;\n\n}\n"

    def test_tab_indent(self):
        settings = ComposerSettings(indent_unit="\t")
        output = _compose(settings=settings, fields=[FieldSpec("id", LONG_OBJ)]).get_output()
        assert "\tLong Widget.id;\n" in output

    def test_body_is_one_level_deeper_than_declaration(self):
        output = _compose(fields=[FieldSpec("id", LONG_OBJ)]).get_output()
        lines = output.split("\n")
        start = lines.index("aspect Widget_Roo_Jpa {")
        end = lines.index("}")
        assert end == len(lines) - 2
        for line in lines[start + 1:end]:
            assert line.startswith("    ") and not line.startswith("     ")

    def test_custom_annotation_renderer(self):
        calls = []

        def renderer(annotation, resolver=None):
            calls.append(annotation.annotation_type.simple_name)
            return "@Custom"

        spec = IntroductionSpec(TARGET, ASPECT, type_annotations=[AnnotationMetadata.of(ENTITY)])
        output = ItdSourceFileComposer(spec, settings=SETTINGS, annotation_renderer=renderer).get_output()
        assert "    declare @type: Widget: @Custom;\n" in output
        assert calls == ["Entity"]
        assert "import" not in output


# =========================================================================
# Tests: Contract violations
# =========================================================================

class TestContractViolations:
    def test_package_mismatch(self):
        spec = IntroductionSpec(TARGET, TypeReference.of("com.other.Widget_Roo_Jpa"))
        with pytest.raises(InvariantViolation, match="identical packages"):
            ItdSourceFileComposer(spec, settings=SETTINGS)

    def test_constructor_parameter_mismatch(self):
        constructor = ConstructorSpec(parameter_types=(AnnotatedType(STRING),), parameter_names=())
        with pytest.raises(InvariantViolation, match="Mismatched parameter names"):
            _compose(constructors=[constructor])

    def test_method_parameter_mismatch(self):
        method = MethodSpec("set", VOID, parameter_names=("value",))
        with pytest.raises(InvariantViolation, match="Mismatched parameter names"):
            _compose(methods=[method])

    def test_missing_spec(self):
        with pytest.raises(ValueError):
            ItdSourceFileComposer(None, settings=SETTINGS)

    @pytest.mark.parametrize("depth", [0, 2])
    def test_terminator_requires_depth_one(self, depth):
        buffer = EmissionBuffer()
        for _ in range(depth):
            buffer.indent()
        with pytest.raises(InvariantViolation, match="Indent level must be 1"):
            phases.append_terminator(buffer)
