"""Inter-type declaration source composer.

Builds the complete source of one AspectJ ITD compilation unit in a
single forward pass over an IntroductionSpec. The import list is only
known once the body has been written, so the package and import header
is rendered last and placed in front of the body.
"""

import logging
from typing import Optional

from ...setting import ComposerSettings, get_settings
from . import phases
from .annotations import AnnotationRenderer, to_source_form
from .buffer import EmissionBuffer
from .imports import ImportRegistrationResolver
from .models import IntroductionSpec

logger = logging.getLogger(__name__)


class ItdSourceFileComposer:
    """Produces the source of an ITD containing the members of ``spec``.

    Construction performs the whole emission; read the result with
    ``get_output()`` and ``is_content()``.

    Raises:
        InvariantViolation: if the aspect and target packages differ, a
            constructor or method has mismatched parameter lists, or the
            body is left unbalanced
    """

    def __init__(
        self,
        spec: IntroductionSpec,
        settings: Optional[ComposerSettings] = None,
        annotation_renderer: Optional[AnnotationRenderer] = None,
    ):
        if spec is None:
            raise ValueError("Introduction spec is required")
        if settings is None:
            settings = get_settings()
        render = annotation_renderer or to_source_form

        self._spec = spec
        self._settings = settings
        self._content = False

        target = spec.introduction_target
        aspect = spec.aspect_type

        # Own resolver per compilation unit; it grows as members are written
        self._resolver = ImportRegistrationResolver(
            aspect.package_name,
            implicit_packages=settings.implicit_packages,
            reserved_types=(target, aspect),
        )
        for registered_import in spec.preregistered_imports:
            if self._resolver.is_addition_legal(registered_import):
                self._resolver.add_import(registered_import)
            else:
                logger.debug(f"Skipping pre-registered import {registered_import.fully_qualified_name}")

        buffer = EmissionBuffer(
            indent_unit=settings.indent_unit,
            newline=settings.newline,
            indent_blank_lines=settings.indent_blank_lines,
        )
        resolver = self._resolver

        phases.append_type_declaration(buffer, spec)
        self._mark(phases.append_parents(buffer, resolver, target, "extends", spec.extends_types))
        self._mark(phases.append_parents(buffer, resolver, target, "implements", spec.implements_types))
        self._mark(phases.append_type_annotations(buffer, resolver, target, spec.type_annotations, render))
        self._mark(phases.append_field_annotations(buffer, resolver, target, spec.field_annotations, render))
        self._mark(phases.append_method_annotations(buffer, resolver, target, spec.method_annotations, render))
        self._mark(phases.append_fields(buffer, resolver, target, spec.fields, render))
        self._mark(phases.append_constructors(buffer, resolver, target, spec.constructors, render))
        self._mark(phases.append_methods(buffer, resolver, target, spec.methods, render))
        phases.append_terminator(buffer)

        # Must run last: the import list is complete only now
        self._output = self._compilation_unit_header() + buffer.getvalue()

        logger.debug(
            f"Composed ITD {aspect.fully_qualified_name} for {target.fully_qualified_name} "
            f"({len(resolver.get_registered_imports())} imports, content={self._content})"
        )

    def _mark(self, emitted: bool) -> None:
        self._content = self._content or emitted

    def _compilation_unit_header(self) -> str:
        newline = self._settings.newline
        aspect = self._spec.aspect_type
        header = []

        if not aspect.is_default_package:
            header.append(f"package {aspect.package_name};{newline}")
            header.append(newline)

        # Sorted for stable output
        imports = self._resolver.get_sorted_imports()
        if imports:
            for import_type in imports:
                header.append(f"import {import_type.fully_qualified_name};{newline}")
            header.append(newline)

        return "".join(header)

    def get_output(self) -> str:
        return self._output

    def is_content(self) -> bool:
        """Whether the ITD declares anything beyond its empty aspect shell.

        Callers use this to discard ITDs that would introduce nothing.
        """
        return self._content
