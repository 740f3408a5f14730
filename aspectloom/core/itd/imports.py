"""Import registration for a single compilation unit.

Decides, for each type written into the ITD, whether its short name is
safe to print and owns the import list that ends up in the header.
Decisions are made eagerly at the point of use because the composer
never revisits text it has already written.
"""

import logging
from typing import Dict, Iterable, List, Set

from .errors import require
from .models import DataType, TypeReference, Wildcard

logger = logging.getLogger(__name__)

DEFAULT_IMPLICIT_PACKAGES = ("java.lang",)


class ImportRegistrationResolver:
    """Import set plus the qualification rules for one home package.

    Attributes:
        home_package: Package of the compilation unit being written.
            Types in it never need an import.
        implicit_packages: Packages whose types are in scope without an
            import (``java.lang``).
    """

    def __init__(
        self,
        home_package: str,
        implicit_packages: Iterable[str] = DEFAULT_IMPLICIT_PACKAGES,
        reserved_types: Iterable[TypeReference] = (),
    ):
        self.home_package = home_package
        self.implicit_packages = frozenset(implicit_packages)

        # fully qualified name -> raw type
        self._imports: Dict[str, TypeReference] = {}
        # name usable in short form -> fully qualified name it stands for
        self._bound_names: Dict[str, str] = {}

        for reserved in reserved_types:
            self._bind(self._local_name(reserved), self._owner_name(reserved))

    # =========================================================================
    # Queries
    # =========================================================================

    def is_addition_legal(self, java_type: TypeReference) -> bool:
        """Whether an import for ``java_type`` may be registered.

        False for anything that cannot or need not be imported, and for
        types whose simple name already stands for a different type.
        """
        if java_type.data_type is not DataType.TYPE or java_type.wildcard is Wildcard.UNBOUNDED:
            return False
        if java_type.is_default_package:
            return False
        if self._is_in_scope(java_type):
            return False
        owner = self._bound_names.get(java_type.simple_name)
        return owner is None or owner == java_type.fully_qualified_name

    def is_fully_qualified_form_required(self, java_type: TypeReference) -> bool:
        """Whether ``java_type`` must be printed fully qualified.

        Pure query: the short form counts as usable when an import for
        the type is registered or could be registered right now.
        """
        if java_type.data_type is not DataType.TYPE:
            return False
        if java_type.fully_qualified_name in self._imports:
            return False
        if self._is_in_scope(java_type):
            owner = self._bound_names.get(self._local_name(java_type))
            return owner is not None and owner != self._owner_name(java_type)
        return not self.is_addition_legal(java_type)

    def get_registered_imports(self) -> Set[TypeReference]:
        return set(self._imports.values())

    def get_sorted_imports(self) -> List[TypeReference]:
        """Registered imports in ascending fully-qualified-name order."""
        return sorted(self._imports.values())

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_import(self, java_type: TypeReference) -> None:
        """Register an import. Idempotent for an already-registered type.

        Raises:
            InvariantViolation: if ``is_addition_legal`` is false
        """
        require(
            self.is_addition_legal(java_type),
            f"Import of {java_type.fully_qualified_name} is not legal in package '{self.home_package}'",
        )
        fqn = java_type.fully_qualified_name
        if fqn in self._imports:
            return
        self._imports[fqn] = java_type.raw()
        self._bind(java_type.simple_name, fqn)
        logger.debug(f"Registered import {fqn}")

    def is_fully_qualified_form_required_after_auto_import(self, java_type: TypeReference) -> bool:
        """Decide qualification, registering an import if that makes the
        short form usable.

        Once a short name has been printed it is bound for the rest of the
        compilation unit, so a later type with the same simple name is
        forced into the fully qualified form.
        """
        if self.is_fully_qualified_form_required(java_type):
            return True
        if java_type.data_type is DataType.TYPE and java_type.fully_qualified_name not in self._imports:
            if self._is_in_scope(java_type):
                self._bind(self._local_name(java_type), self._owner_name(java_type))
            else:
                self.add_import(java_type)
        return False

    def resolve_name(self, java_type: TypeReference) -> str:
        """The name to print for ``java_type`` without its type arguments."""
        if java_type.data_type is not DataType.TYPE:
            return java_type.simple_name
        if self.is_fully_qualified_form_required_after_auto_import(java_type):
            return java_type.fully_qualified_name
        if java_type.fully_qualified_name in self._imports:
            return java_type.simple_name
        return java_type.relative_name

    # =========================================================================
    # Helpers
    # =========================================================================

    def _is_in_scope(self, java_type: TypeReference) -> bool:
        package = java_type.package_name
        return package == self.home_package or package in self.implicit_packages

    @staticmethod
    def _local_name(java_type: TypeReference) -> str:
        """First segment of the package-relative name (``Outer`` for ``Outer.Inner``)."""
        return java_type.relative_name.split(".", 1)[0]

    @classmethod
    def _owner_name(cls, java_type: TypeReference) -> str:
        """Fully qualified name of the outermost type (``com.acme.Outer`` for ``com.acme.Outer.Inner``)."""
        local_name = cls._local_name(java_type)
        if java_type.is_default_package:
            return local_name
        return f"{java_type.package_name}.{local_name}"

    def _bind(self, name: str, fully_qualified_name: str) -> None:
        self._bound_names.setdefault(name, fully_qualified_name)
