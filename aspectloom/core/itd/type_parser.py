"""Java type-string parsing using tree-sitter.

Turns source text such as ``java.util.Map<java.lang.String, ? extends
com.acme.Foo>[]`` into a TypeReference. The text is wrapped in a method
declaration so the Java grammar parses it in return-type position,
which accepts every type form including ``void``.
"""

import dataclasses
import logging
from typing import Iterable, Optional

import tree_sitter
import tree_sitter_java

from .models import TypeReference

logger = logging.getLogger(__name__)

_JAVA_LANGUAGE = tree_sitter.Language(tree_sitter_java.language())

_WRAPPER_PREFIX = "class __TypeHolder { "
_WRAPPER_SUFFIX = " __probe(); }"

_PRIMITIVE_NODES = frozenset({"void_type", "integral_type", "floating_point_type", "boolean_type"})


def parse_type_reference(text: str, type_variables: Iterable[str] = ()) -> TypeReference:
    """Parse Java type source text into a TypeReference.

    Args:
        text: Type as written in Java source. Names should be fully
            qualified; unqualified names are taken to be in the default
            package unless listed in ``type_variables``.
        type_variables: Names to treat as type variables (``T``, ``E``)

    Returns:
        The parsed TypeReference

    Raises:
        ValueError: If the text is not a single, supported Java type
    """
    if not text or not text.strip():
        raise ValueError("Type text is required")

    source = (_WRAPPER_PREFIX + text.strip() + _WRAPPER_SUFFIX).encode("utf-8")
    parser = tree_sitter.Parser(_JAVA_LANGUAGE)
    tree = parser.parse(source)

    if tree.root_node.has_error:
        raise ValueError(f"Not a valid Java type: {text!r}")

    type_node = _find_type_node(tree.root_node, source)
    if type_node is None:
        raise ValueError(f"Not a valid Java type: {text!r}")

    reference = _to_reference(type_node, source, frozenset(type_variables))
    logger.debug(f"Parsed type {text!r} as {reference.fully_qualified_name}")
    return reference


# =========================================================================
# Tree walking
# =========================================================================


def _find_type_node(root: tree_sitter.Node, source: bytes) -> Optional[tree_sitter.Node]:
    """Return the return-type node of the single probe method, if any."""
    classes = [c for c in root.children if c.type == "class_declaration"]
    if len(classes) != 1:
        return None
    body = classes[0].child_by_field_name("body")
    if body is None:
        return None
    members = body.named_children
    if len(members) != 1 or members[0].type != "method_declaration":
        return None
    method = members[0]
    if _text(method.child_by_field_name("name"), source) != "__probe":
        return None
    return method.child_by_field_name("type")


def _to_reference(node: tree_sitter.Node, source: bytes, type_variables: frozenset) -> TypeReference:
    node_type = node.type

    if node_type in _PRIMITIVE_NODES:
        return TypeReference.primitive(_text(node, source))

    if node_type == "type_identifier":
        name = _text(node, source)
        if name in type_variables:
            return TypeReference.variable(name)
        return TypeReference.of(name)

    if node_type == "scoped_type_identifier":
        if _contains(node, "generic_type"):
            raise ValueError(
                f"Parameterized enclosing types are not supported: {_text(node, source)!r}"
            )
        if _contains(node, "annotation") or _contains(node, "marker_annotation"):
            raise ValueError(f"Type annotations are not supported: {_text(node, source)!r}")
        return TypeReference.of("".join(_text(node, source).split()))

    if node_type == "generic_type":
        named = node.named_children
        base = _to_reference(named[0], source, type_variables)
        arguments = [c for c in named[1:] if c.type == "type_arguments"]
        parameters = []
        if arguments:
            parameters = [_to_reference(c, source, type_variables) for c in arguments[0].named_children]
        return dataclasses.replace(base, parameters=tuple(parameters))

    if node_type == "array_type":
        element = _to_reference(node.child_by_field_name("element"), source, type_variables)
        dimensions = _text(node.child_by_field_name("dimensions"), source).count("[")
        return dataclasses.replace(element, array_dimensions=element.array_dimensions + dimensions)

    if node_type == "wildcard":
        is_super = any(c.type == "super" for c in node.children)
        bounds = [
            c for c in node.named_children
            if c.type not in ("super", "annotation", "marker_annotation")
        ]
        if not bounds:
            return TypeReference.wildcard_of()
        bound = _to_reference(bounds[-1], source, type_variables)
        return TypeReference.wildcard_of(bound, extends=not is_super)

    raise ValueError(f"Unsupported type form '{node_type}': {_text(node, source)!r}")


def _contains(node: tree_sitter.Node, node_type: str) -> bool:
    for child in node.children:
        if child.type == node_type or _contains(child, node_type):
            return True
    return False


def _text(node: Optional[tree_sitter.Node], source: bytes) -> str:
    if node is None:
        return ""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
