"""Semantic token classification for a parsed, type-checked file.

Declaration sites are classified from syntax alone. Every other name is
classified from the type the evaluator infers for it, falling back to
symbol facts (declared type, finality) and the constant naming convention.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from semtokens.naming import is_constant_name
from semtokens.nodes import (
    ClassNode,
    FunctionNode,
    ImportAsNode,
    ImportFromAsNode,
    ImportFromNode,
    NameNode,
    ParseNode,
    TypeAliasNode,
)
from semtokens.tokens import SemanticTokenItem, TokenKind, TokenModifier
from semtokens.types import FunctionDeclaration, Type, TypeCategory, TypeEvaluator
from semtokens.walker import ParseTreeWalker

logger = logging.getLogger(__name__)

_TYPE_KEYWORD_LENGTH = len("type")


class SemanticTokensWalker(ParseTreeWalker):
    """Collects ``SemanticTokenItem``s in traversal order into ``items``.

    Use one instance per traversal. Without an evaluator only declaration
    sites, imports and ``type`` keywords are classified.
    """

    def __init__(self, evaluator: TypeEvaluator | None = None) -> None:
        self._evaluator = evaluator
        self.items: list[SemanticTokenItem] = []

    def visit_class(self, node: ClassNode) -> bool:
        self.walk_many(node.decorators)
        self._add_item(node.name, TokenKind.CLASS, TokenModifier.DEFINITION)
        self.walk_many(node.type_parameters)
        self.walk_many(node.arguments)
        self.walk_many(node.suite)
        return False

    def visit_function(self, node: FunctionNode) -> bool:
        modifiers = [TokenModifier.DEFINITION]
        if node.is_async:
            modifiers.append(TokenModifier.ASYNC)
        self.walk_many(node.decorators)
        self._add_item(node.name, _callable_kind(node.declaration), *modifiers)
        # parameters and the return annotation are plain names
        self.walk_many(node.type_parameters)
        self.walk_many(node.parameters)
        if node.return_annotation is not None:
            self.walk(node.return_annotation)
        self.walk_many(node.suite)
        return False

    def visit_import_as(self, node: ImportAsNode) -> bool:
        self._add_namespaces(node.module.name_parts)
        if node.alias is not None:
            self._add_item(node.alias, TokenKind.NAMESPACE)
        return False

    def visit_import_from(self, node: ImportFromNode) -> bool:
        self._add_namespaces(node.module.name_parts)
        self.walk_many(node.imports)
        return False

    def visit_import_from_as(self, node: ImportFromAsNode) -> bool:
        self._visit_name_with_type(node.name, self._get_type(node.alias or node.name))
        if node.alias is not None:
            self.walk(node.alias)
        return False

    def visit_name(self, node: NameNode) -> bool:
        self._visit_name_with_type(node, self._get_type(node))
        return True

    def visit_type_alias(self, node: TypeAliasNode) -> bool:
        # Editors color the soft keyword as a type reference; override it.
        self.items.append(
            SemanticTokenItem(TokenKind.KEYWORD, frozenset(), node.start, _TYPE_KEYWORD_LENGTH)
        )
        return True

    def _get_type(self, node: ParseNode) -> Type | None:
        if self._evaluator is None:
            return None
        return self._evaluator.get_type(node)

    def _visit_name_with_type(self, node: NameNode, type_: Type | None) -> None:
        if type_ is None or type_.category in (TypeCategory.UNBOUND, TypeCategory.UNKNOWN):
            logger.debug("no token for %r at %d: type unavailable", node.value, node.start)
            return

        category = type_.category
        if category is TypeCategory.FUNCTION:
            if type_.is_instance:
                self._add_item(node, _callable_kind(type_.declaration))
            else:
                # alias to a Callable
                self._add_item(node, TokenKind.TYPE)
            return
        if category is TypeCategory.OVERLOADED_FUNCTION:
            if type_.is_instance:
                first = type_.overloads[0].declaration if type_.overloads else None
                self._add_item(node, _callable_kind(first))
            else:
                self._add_item(node, TokenKind.TYPE)
            return
        if category is TypeCategory.MODULE:
            self._add_item(node, TokenKind.NAMESPACE)
            return
        if type_.is_instantiable:
            if category is TypeCategory.TYPE_VAR:
                self._add_item(node, TokenKind.TYPE_PARAMETER)
                return
            if category is TypeCategory.UNION:
                self._add_item(node, TokenKind.TYPE)
                return
            if category is TypeCategory.CLASS:
                self._add_item(node, TokenKind.CLASS)
                return

        self._visit_variable(node, type_)

    def _visit_variable(self, node: NameNode, type_: Type) -> None:
        assert self._evaluator is not None
        found = self._evaluator.look_up_symbol_recursive(node, node.value, False)
        symbol = found.symbol if found is not None else None

        if (
            type_.category is TypeCategory.NEVER
            and symbol is not None
            and self._evaluator.get_declared_type_of_symbol(symbol).type is None
        ):
            # Never carries both the instance and instantiable flags, so the
            # missing declared type is what marks a Never alias/annotation.
            self._add_item(node, TokenKind.TYPE)
        elif is_constant_name(node.value) or (
            symbol is not None and self._evaluator.is_final_variable(symbol)
        ):
            self._add_item(node, TokenKind.VARIABLE, TokenModifier.READONLY)
        else:
            self._add_item(node, TokenKind.VARIABLE)

    def _add_namespaces(self, parts: Iterable[NameNode]) -> None:
        for part in parts:
            self._add_item(part, TokenKind.NAMESPACE)

    def _add_item(self, node: ParseNode, kind: TokenKind, *modifiers: TokenModifier) -> None:
        self.items.append(SemanticTokenItem(kind, frozenset(modifiers), node.start, node.length))


def _callable_kind(declaration: FunctionDeclaration | None) -> TokenKind:
    if declaration is not None and declaration.is_method:
        return TokenKind.METHOD
    return TokenKind.FUNCTION


def collect_semantic_tokens(
    tree: ParseNode, evaluator: TypeEvaluator | None = None
) -> list[SemanticTokenItem]:
    """Walk *tree* and return its semantic tokens in source order."""
    walker = SemanticTokensWalker(evaluator)
    walker.walk(tree)
    return walker.items
