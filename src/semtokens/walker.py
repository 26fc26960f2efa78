"""Depth-first parse tree walker with per-node-kind hooks."""

from __future__ import annotations

from collections.abc import Iterable

from semtokens.nodes import (
    ClassNode,
    FunctionNode,
    GenericNode,
    ImportAsNode,
    ImportFromAsNode,
    ImportFromNode,
    ImportNode,
    MemberAccessNode,
    ModuleNameNode,
    ModuleNode,
    NameNode,
    ParameterNode,
    ParseNode,
    TypeAliasNode,
    TypeParameterNode,
)


class ParseTreeWalker:
    """Visits nodes in source order.

    Subclasses override ``visit_<kind>`` hooks. A hook returning True lets the
    walker descend into the node's children; False skips them, which is how a
    hook takes over the traversal of its own subtree.
    """

    def walk(self, node: ParseNode) -> None:
        if self._dispatch(node):
            self.walk_many(node.child_nodes())

    def walk_many(self, nodes: Iterable[ParseNode]) -> None:
        for node in nodes:
            self.walk(node)

    def _dispatch(self, node: ParseNode) -> bool:
        return getattr(self, f"visit_{node.kind}")(node)

    def visit_module(self, node: ModuleNode) -> bool:
        return True

    def visit_class(self, node: ClassNode) -> bool:
        return True

    def visit_function(self, node: FunctionNode) -> bool:
        return True

    def visit_parameter(self, node: ParameterNode) -> bool:
        return True

    def visit_type_parameter(self, node: TypeParameterNode) -> bool:
        return True

    def visit_name(self, node: NameNode) -> bool:
        return True

    def visit_member_access(self, node: MemberAccessNode) -> bool:
        return True

    def visit_import(self, node: ImportNode) -> bool:
        return True

    def visit_import_as(self, node: ImportAsNode) -> bool:
        return True

    def visit_import_from(self, node: ImportFromNode) -> bool:
        return True

    def visit_import_from_as(self, node: ImportFromAsNode) -> bool:
        return True

    def visit_module_name(self, node: ModuleNameNode) -> bool:
        return True

    def visit_type_alias(self, node: TypeAliasNode) -> bool:
        return True

    def visit_generic(self, node: GenericNode) -> bool:
        return True
