# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""AST lookups deciding whether a source range is a dynamic array declaration."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Literal, Mapping

logger = logging.getLogger(__name__)

LookupOutcome = Literal["found", "not_found"]

_DECLARATION_TYPES = frozenset({"VariableDeclaration", "VariableDeclarationStatement"})
_ARRAY_TYPES = frozenset({"ArrayTypeName"})


class NodeKind(Enum):
    """Node categories the heuristics distinguish."""

    DECLARATION = "declaration"
    ARRAY_TYPE = "array_type"
    OTHER = "other"

    @classmethod
    def of(cls, node_type: str) -> "NodeKind":
        if node_type in _DECLARATION_TYPES:
            return cls.DECLARATION
        if node_type in _ARRAY_TYPES:
            return cls.ARRAY_TYPE
        return cls.OTHER


@dataclass(frozen=True)
class AstNode:
    """Represent one compact-JSON AST node with a decoded byte range.

    Attributes:
        kind: Heuristic category.
        node_type: Compiler node type name.
        start: Start byte offset.
        length: Range length in bytes.
        depth: Nesting depth below the root.
        payload: Raw node mapping.
    """

    kind: NodeKind
    node_type: str
    start: int
    length: int
    depth: int
    payload: Mapping[str, Any]

    def contains(self, start: int, length: int) -> bool:
        return self.start <= start and start + length <= self.start + self.length

    def accept(self, visitor: "AstVisitor") -> bool:
        if self.kind is NodeKind.DECLARATION:
            return visitor.visit_declaration(self)
        if self.kind is NodeKind.ARRAY_TYPE:
            return visitor.visit_array_type(self)
        return visitor.visit_other(self)


@dataclass(frozen=True)
class NodeLookup:
    """Represent the result of an enclosing-node search."""

    outcome: LookupOutcome
    node: AstNode | None = None

    @classmethod
    def not_found(cls) -> "NodeLookup":
        return cls(outcome="not_found")


class AstVisitor:
    """Dispatch on node kind; subclasses answer a yes/no question."""

    def visit_declaration(self, node: AstNode) -> bool:
        return False

    def visit_array_type(self, node: AstNode) -> bool:
        return False

    def visit_other(self, node: AstNode) -> bool:
        return False


class _DeclarationCheck(AstVisitor):
    def visit_declaration(self, node: AstNode) -> bool:
        return True


class _DynamicArrayCheck(AstVisitor):
    """Answer whether a declaration's type is an array without fixed length."""

    def visit_declaration(self, node: AstNode) -> bool:
        if node.node_type == "VariableDeclarationStatement":
            declarations = node.payload.get("declarations") or ()
            return any(
                self._declares_dynamic_array(declaration)
                for declaration in declarations
                if isinstance(declaration, Mapping)
            )
        return self._declares_dynamic_array(node.payload)

    def visit_array_type(self, node: AstNode) -> bool:
        return node.payload.get("length") is None

    def _declares_dynamic_array(self, declaration: Mapping[str, Any]) -> bool:
        type_name = declaration.get("typeName")
        if not isinstance(type_name, Mapping):
            return False
        if type_name.get("nodeType") not in _ARRAY_TYPES:
            return False
        return type_name.get("length") is None


def parse_src(src: object) -> tuple[int, int] | None:
    """Decode an AST ``src`` attribute to ``(start, length)``."""
    if not isinstance(src, str):
        return None
    fields = src.split(":")
    if len(fields) < 2:
        return None
    try:
        return int(fields[0]), int(fields[1])
    except ValueError:
        return None


def iter_nodes(ast: Mapping[str, Any]) -> Iterator[AstNode]:
    """Walk every AST node carrying a byte range, parents before children.

    Args:
        ast: Compact-JSON AST root.

    Yields:
        Nodes with decoded byte ranges.
    """
    stack: list[tuple[Any, int]] = [(ast, 0)]
    while stack:
        value, depth = stack.pop()
        if isinstance(value, list):
            stack.extend((item, depth) for item in reversed(value))
            continue
        if not isinstance(value, Mapping):
            continue
        node_range = parse_src(value.get("src"))
        child_depth = depth
        if node_range is not None and "nodeType" in value:
            start, length = node_range
            node_type = str(value["nodeType"])
            yield AstNode(
                kind=NodeKind.of(node_type),
                node_type=node_type,
                start=start,
                length=length,
                depth=depth,
                payload=value,
            )
            child_depth = depth + 1
        children = [
            child for child in value.values() if isinstance(child, (Mapping, list))
        ]
        stack.extend((child, child_depth) for child in reversed(children))


def find_enclosing_node(ast: Mapping[str, Any] | None, start: int, length: int) -> NodeLookup:
    """Find the smallest AST node whose byte range contains a query range.

    Ties between equally sized nodes go to the deeper one.

    Args:
        ast: Compact-JSON AST root, or ``None`` when unavailable.
        start: Query start byte offset.
        length: Query length in bytes.

    Returns:
        Lookup result; ``not_found`` when no node contains the range.
    """
    if not ast or start < 0 or length < 0:
        return NodeLookup.not_found()
    best: AstNode | None = None
    for node in iter_nodes(ast):
        if not node.contains(start, length):
            continue
        if best is None or (node.length, -node.depth) <= (best.length, -best.depth):
            best = node
    if best is None:
        return NodeLookup.not_found()
    return NodeLookup(outcome="found", node=best)


def is_variable_declaration(lookup: NodeLookup) -> bool:
    if lookup.node is None:
        return False
    return lookup.node.accept(_DeclarationCheck())


def is_dynamic_array(lookup: NodeLookup) -> bool:
    if lookup.node is None:
        return False
    return lookup.node.accept(_DynamicArrayCheck())


def is_dynamic_array_declaration(
    ast: Mapping[str, Any] | None, start: int, length: int
) -> bool:
    """Return whether a byte range denotes a dynamically sized array declaration.

    Args:
        ast: Compact-JSON AST root.
        start: Range start byte offset.
        length: Range length in bytes.

    Returns:
        ``True`` only when the enclosing node is a declaration of an array
        type without a fixed length.
    """
    lookup = find_enclosing_node(ast, start, length)
    if lookup.outcome == "not_found":
        logger.debug(f"No enclosing AST node (start={start} length={length})")
        return False
    return is_variable_declaration(lookup) and is_dynamic_array(lookup)
