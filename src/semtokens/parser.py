"""Python front end: converts source text into a semtokens parse tree.

The tree is built from a tree-sitter-python syntax tree, whose identifier
nodes carry their own byte ranges. Python's own ``ast`` module only decides
whether the source is valid, so syntax errors carry CPython's messages and
positions.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Iterable

import tree_sitter_python
from tree_sitter import Language, Node, Parser

from semtokens.errors import SourceSyntaxError
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
from semtokens.tokens import LineIndex, Position
from semtokens.types import FunctionDeclaration

logger = logging.getLogger(__name__)

PY_LANGUAGE = Language(tree_sitter_python.language())

# Wrappers whose children are spliced into the parent.
_TRANSPARENT = frozenset({"block", "expression_statement", "type", "parenthesized_expression"})
_IDENTIFIERS = frozenset({"identifier", "keyword_identifier"})
_PARAMETER_SPLATS = frozenset({"list_splat_pattern", "dictionary_splat_pattern"})


def parse(source: str, filename: str = "input.py") -> ModuleNode:
    """Parse Python *source* into a ``ModuleNode``.

    Raises ``SourceSyntaxError`` if the source does not parse.
    """
    try:
        ast.parse(source, filename)
    except SyntaxError as exc:
        raise _syntax_error(exc, source) from exc
    except ValueError as exc:
        # null bytes on interpreters that report them as ValueError
        raise SourceSyntaxError(str(exc), Position(1, 1, 0), source) from exc

    source_bytes = source.encode("utf-8", errors="surrogatepass")
    tree = Parser(PY_LANGUAGE).parse(source_bytes)
    if tree.root_node.has_error:
        logger.debug("%s: tree-sitter recovered from constructs it does not know", filename)

    module = _Converter(source, source_bytes).convert_module(tree.root_node)
    logger.debug("parsed %s: %d top-level statements", filename, len(module.statements))
    return module


def _syntax_error(exc: SyntaxError, source: str) -> SourceSyntaxError:
    index = LineIndex(source)
    line = min(max(exc.lineno or 1, 1), index.line_count)
    column = max(exc.offset or 1, 1)
    column = min(column, len(index.line_text(line)) + 1)
    position = Position(line, column, index.offset_of(line, column))
    return SourceSyntaxError(exc.msg or "invalid syntax", position, source)


def _char_offsets(source: str) -> list[int]:
    """Character offset of every UTF-8 byte offset of *source*, plus the end."""
    table: list[int] = []
    for i, ch in enumerate(source):
        table.extend([i] * len(ch.encode("utf-8", errors="surrogatepass")))
    table.append(len(source))
    return table


class _Converter:
    """Converts one tree-sitter ``module`` node into parse nodes."""

    def __init__(self, source: str, source_bytes: bytes) -> None:
        self._source = source
        self._source_bytes = source_bytes
        self._chars = None if source.isascii() else _char_offsets(source)
        self._in_class = False

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def _offset(self, byte_offset: int) -> int:
        if self._chars is None:
            return byte_offset
        return self._chars[byte_offset]

    def _span(self, node: Node) -> tuple[int, int]:
        return self._offset(node.start_byte), self._offset(node.end_byte)

    def _text(self, node: Node) -> str:
        raw = self._source_bytes[node.start_byte : node.end_byte]
        return raw.decode("utf-8", errors="surrogatepass")

    def _name(self, node: Node) -> NameNode:
        start, end = self._span(node)
        return NameNode(start, end - start, self._text(node))

    def _identifier_in(self, node: Node | None) -> Node | None:
        """*node* itself if it is an identifier, else its first identifier child."""
        if node is None or node.type in _IDENTIFIERS:
            return node
        for child in node.named_children:
            if child.type in _IDENTIFIERS:
                return child
        return None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def convert_module(self, root: Node) -> ModuleNode:
        return ModuleNode(0, len(self._source), self._convert_children(root))

    def convert(self, node: Node | None) -> ParseNode | None:
        if node is None:
            return None
        if node.type in _TRANSPARENT:
            children = self._convert_children(node)
            if not children:
                return None
            if len(children) == 1:
                return children[0]
            start, end = self._span(node)
            return GenericNode(start, end - start, node.type, children)
        method = getattr(self, f"_convert_{node.type}", None)
        if method is None:
            return self._generic(node)
        return method(node)

    def _convert_children(self, node: Node) -> tuple[ParseNode, ...]:
        return self._convert_all(node.named_children)

    def _convert_all(self, nodes: Iterable[Node]) -> tuple[ParseNode, ...]:
        converted: list[ParseNode] = []
        for child in nodes:
            if child.is_missing:
                continue
            if child.type in _TRANSPARENT:
                converted.extend(self._convert_children(child))
                continue
            result = self.convert(child)
            if result is not None:
                converted.append(result)
        return tuple(converted)

    def _generic(self, node: Node) -> GenericNode | None:
        children = self._convert_children(node)
        if not children:
            return None
        start, end = self._span(node)
        return GenericNode(start, end - start, node.type, children)

    def _convert_comment(self, node: Node) -> None:
        return None

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _convert_decorated_definition(self, node: Node) -> ParseNode | None:
        decorators: list[ParseNode] = []
        for decorator in node.named_children:
            if decorator.type != "decorator":
                continue
            decorators.extend(self._convert_children(decorator))
        definition = node.child_by_field_name("definition")
        if definition is None:
            return self._generic(node)
        if definition.type == "class_definition":
            return self._convert_class_definition(definition, tuple(decorators))
        if definition.type == "function_definition":
            return self._convert_function_definition(definition, tuple(decorators))
        return self._generic(node)

    def _convert_class_definition(
        self, node: Node, decorators: tuple[ParseNode, ...] = ()
    ) -> ClassNode | GenericNode | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return self._generic(node)
        start, end = self._span(node)
        type_parameters = self._type_parameters_of(node.child_by_field_name("type_parameters"))
        superclasses = node.child_by_field_name("superclasses")
        arguments = self._convert_children(superclasses) if superclasses is not None else ()

        outer = self._in_class
        self._in_class = True
        try:
            suite = self._body_of(node)
        finally:
            self._in_class = outer

        return ClassNode(
            start,
            end - start,
            self._name(name_node),
            decorators,
            type_parameters,
            arguments,
            suite,
        )

    def _convert_function_definition(
        self, node: Node, decorators: tuple[ParseNode, ...] = ()
    ) -> FunctionNode | GenericNode | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return self._generic(node)
        start, end = self._span(node)
        is_async = any(child.type == "async" for child in node.children)
        declaration = FunctionDeclaration(is_method=self._in_class, is_async=is_async)
        type_parameters = self._type_parameters_of(node.child_by_field_name("type_parameters"))
        parameters = self._parameters_of(node.child_by_field_name("parameters"))
        return_annotation = self.convert(node.child_by_field_name("return_type"))

        outer = self._in_class
        self._in_class = False
        try:
            suite = self._body_of(node)
        finally:
            self._in_class = outer

        return FunctionNode(
            start,
            end - start,
            self._name(name_node),
            is_async=is_async,
            declaration=declaration,
            decorators=decorators,
            type_parameters=type_parameters,
            parameters=parameters,
            return_annotation=return_annotation,
            suite=suite,
        )

    def _body_of(self, node: Node) -> tuple[ParseNode, ...]:
        body = node.child_by_field_name("body")
        return self._convert_children(body) if body is not None else ()

    def _parameters_of(self, node: Node | None) -> tuple[ParseNode, ...]:
        """Parameter nodes interleaved with their default value expressions."""
        if node is None:
            return ()
        converted: list[ParseNode] = []
        for child in node.named_children:
            converted.extend(self._parameter_of(child))
        return tuple(converted)

    def _parameter_of(self, node: Node) -> list[ParseNode]:
        if node.type in _IDENTIFIERS:
            name = self._name(node)
            return [ParameterNode(name.start, name.length, name)]

        if node.type in _PARAMETER_SPLATS:
            name_node = self._identifier_in(node)
            if name_node is None:
                return []
            name = self._name(name_node)
            return [ParameterNode(name.start, name.length, name)]

        if node.type in ("typed_parameter", "default_parameter", "typed_default_parameter"):
            target = node.child_by_field_name("name")
            if target is None:
                target = node.named_children[0]
            name_node = self._identifier_in(target)
            if name_node is None:
                generic = self._generic(node)
                return [generic] if generic is not None else []
            name = self._name(name_node)
            annotation = self.convert(node.child_by_field_name("type"))
            end = annotation.end if annotation is not None else name.end
            parts: list[ParseNode] = [
                ParameterNode(name.start, end - name.start, name, annotation)
            ]
            value = self.convert(node.child_by_field_name("value"))
            if value is not None:
                parts.append(value)
            return parts

        # separators and tuple parameters
        converted = self.convert(node)
        return [converted] if converted is not None else []

    def _convert_lambda_parameters(self, node: Node) -> GenericNode | None:
        children = self._parameters_of(node)
        if not children:
            return None
        start, end = self._span(node)
        return GenericNode(start, end - start, node.type, children)

    def _type_parameters_of(self, node: Node | None) -> tuple[TypeParameterNode, ...]:
        if node is None:
            return ()
        converted: list[TypeParameterNode] = []
        for child in node.named_children:
            param = self._type_parameter_of(child)
            if param is not None:
                converted.append(param)
        return tuple(converted)

    def _type_parameter_of(self, node: Node) -> TypeParameterNode | None:
        """``T``, ``T: bound``, ``*Ts`` or ``**P``, each wrapped in a ``type`` node."""
        inner = node.named_children[0] if node.type == "type" and node.named_children else node
        bound = None
        if inner.type == "constrained_type":
            parts = inner.named_children
            name_node = self._identifier_in(parts[0])
            bound = self.convert(parts[1]) if len(parts) > 1 else None
        else:
            name_node = self._identifier_in(inner)
        if name_node is None:
            logger.debug("skipping type parameter %r", self._text(node))
            return None
        start, end = self._span(node)
        return TypeParameterNode(start, end - start, self._name(name_node), bound)

    def _convert_type_alias_statement(self, node: Node) -> TypeAliasNode | GenericNode | None:
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None:
            return self._generic(node)
        target = left.named_children[0] if left.type == "type" and left.named_children else left
        type_parameters: tuple[TypeParameterNode, ...] = ()
        if target.type == "generic_type":
            type_parameters = self._type_parameters_of(
                next((c for c in target.named_children if c.type == "type_parameter"), None)
            )
        name_node = self._identifier_in(target)
        if name_node is None:
            return self._generic(node)

        start, end = self._span(node)
        expression = self.convert(right)
        if expression is None:
            right_start, right_end = self._span(right)
            expression = GenericNode(right_start, right_end - right_start, right.type, ())
        return TypeAliasNode(start, end - start, self._name(name_node), expression, type_parameters)

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _module_name(self, node: Node) -> ModuleNameNode:
        """``dotted_name``, ``relative_import`` or the ``__future__`` keyword."""
        start, end = self._span(node)
        leading_dots = 0
        dotted: Node | None = node
        if node.type == "relative_import":
            dotted = None
            for child in node.named_children:
                if child.type == "import_prefix":
                    leading_dots = self._text(child).count(".")
                elif child.type == "dotted_name":
                    dotted = child
        if dotted is None:
            parts: tuple[NameNode, ...] = ()
        elif dotted.type == "dotted_name":
            parts = tuple(self._name(c) for c in dotted.named_children if c.type in _IDENTIFIERS)
        else:
            parts = (self._name(dotted),)
        return ModuleNameNode(start, end - start, leading_dots, parts)

    def _convert_import_statement(self, node: Node) -> ImportNode:
        start, end = self._span(node)
        imports: list[ImportAsNode] = []
        for clause in node.children_by_field_name("name"):
            clause_start, clause_end = self._span(clause)
            alias = None
            if clause.type == "aliased_import":
                dotted = clause.child_by_field_name("name")
                alias_node = clause.child_by_field_name("alias")
                alias = self._name(alias_node) if alias_node is not None else None
            else:
                dotted = clause
            if dotted is None:
                continue
            imports.append(
                ImportAsNode(clause_start, clause_end - clause_start, self._module_name(dotted), alias)
            )
        return ImportNode(start, end - start, tuple(imports))

    def _convert_import_from_statement(self, node: Node) -> ImportFromNode | GenericNode | None:
        module_node = node.child_by_field_name("module_name")
        if module_node is None:
            return self._generic(node)
        return self._import_from(node, self._module_name(module_node))

    def _convert_future_import_statement(self, node: Node) -> ImportFromNode:
        keyword = next(c for c in node.children if c.type == "__future__")
        return self._import_from(node, self._module_name(keyword))

    def _import_from(self, node: Node, module: ModuleNameNode) -> ImportFromNode:
        start, end = self._span(node)
        is_wildcard = any(c.type == "wildcard_import" for c in node.named_children)
        imports: list[ImportFromAsNode] = []
        for clause in node.children_by_field_name("name"):
            alias = None
            if clause.type == "aliased_import":
                alias_node = clause.child_by_field_name("alias")
                alias = self._name(alias_node) if alias_node is not None else None
                name_node = self._identifier_in(clause.child_by_field_name("name"))
            else:
                name_node = self._identifier_in(clause)
            if name_node is None:
                continue
            clause_start, clause_end = self._span(clause)
            imports.append(
                ImportFromAsNode(clause_start, clause_end - clause_start, self._name(name_node), alias)
            )
        return ImportFromNode(start, end - start, module, tuple(imports), is_wildcard)

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def _convert_identifier(self, node: Node) -> NameNode:
        return self._name(node)

    _convert_keyword_identifier = _convert_identifier

    def _convert_attribute(self, node: Node) -> ParseNode | None:
        member_node = node.child_by_field_name("attribute")
        if member_node is None:
            return self._generic(node)
        member = self._name(member_node)
        left = self.convert(node.child_by_field_name("object"))
        if left is None:
            # literal receiver, e.g. "sep".join
            return member
        start, end = self._span(node)
        return MemberAccessNode(start, end - start, left, member)
