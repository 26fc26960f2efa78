"""Parse tree node types consumed by the tree walkers.

Offsets are character offsets into the source text. Every node lists its
children in source order through ``child_nodes()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from semtokens.types import FunctionDeclaration


class ParseNode:
    """Base for all parse tree nodes."""

    __slots__ = ()

    kind: ClassVar[str]
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class NameNode(ParseNode):
    """An identifier occurrence."""

    kind: ClassVar[str] = "name"

    start: int
    length: int
    value: str


@dataclass(frozen=True, slots=True)
class MemberAccessNode(ParseNode):
    """``left.member``."""

    kind: ClassVar[str] = "member_access"

    start: int
    length: int
    left: ParseNode
    member: NameNode

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return (self.left, self.member)


@dataclass(frozen=True, slots=True)
class GenericNode(ParseNode):
    """Any construct without a dedicated node type; *label* names it."""

    kind: ClassVar[str] = "generic"

    start: int
    length: int
    label: str
    children: tuple[ParseNode, ...]

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return self.children


@dataclass(frozen=True, slots=True)
class ParameterNode(ParseNode):
    kind: ClassVar[str] = "parameter"

    start: int
    length: int
    name: NameNode
    annotation: ParseNode | None = None

    def child_nodes(self) -> tuple[ParseNode, ...]:
        if self.annotation is None:
            return (self.name,)
        return (self.name, self.annotation)


@dataclass(frozen=True, slots=True)
class TypeParameterNode(ParseNode):
    """``T``, ``T: bound``, ``*Ts`` or ``**P`` in a type parameter list."""

    kind: ClassVar[str] = "type_parameter"

    start: int
    length: int
    name: NameNode
    bound: ParseNode | None = None
    default: ParseNode | None = None

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return tuple(n for n in (self.name, self.bound, self.default) if n is not None)


@dataclass(frozen=True, slots=True)
class ClassNode(ParseNode):
    kind: ClassVar[str] = "class"

    start: int
    length: int
    name: NameNode
    decorators: tuple[ParseNode, ...] = ()
    type_parameters: tuple[TypeParameterNode, ...] = ()
    arguments: tuple[ParseNode, ...] = ()
    suite: tuple[ParseNode, ...] = ()

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return (
            *self.decorators,
            self.name,
            *self.type_parameters,
            *self.arguments,
            *self.suite,
        )


@dataclass(frozen=True, slots=True)
class FunctionNode(ParseNode):
    """A ``def`` or ``async def`` statement."""

    kind: ClassVar[str] = "function"

    start: int
    length: int
    name: NameNode
    is_async: bool = False
    declaration: FunctionDeclaration | None = None
    decorators: tuple[ParseNode, ...] = ()
    type_parameters: tuple[TypeParameterNode, ...] = ()
    # Parameter nodes interleaved with their default value expressions.
    parameters: tuple[ParseNode, ...] = ()
    return_annotation: ParseNode | None = None
    suite: tuple[ParseNode, ...] = ()

    def child_nodes(self) -> tuple[ParseNode, ...]:
        returns = () if self.return_annotation is None else (self.return_annotation,)
        return (
            *self.decorators,
            self.name,
            *self.type_parameters,
            *self.parameters,
            *returns,
            *self.suite,
        )


@dataclass(frozen=True, slots=True)
class ModuleNameNode(ParseNode):
    """Dotted module path of an import, with its relative-import dot count."""

    kind: ClassVar[str] = "module_name"

    start: int
    length: int
    leading_dots: int
    name_parts: tuple[NameNode, ...]

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return self.name_parts


@dataclass(frozen=True, slots=True)
class ImportAsNode(ParseNode):
    """One ``a.b.c [as alias]`` clause of an ``import`` statement."""

    kind: ClassVar[str] = "import_as"

    start: int
    length: int
    module: ModuleNameNode
    alias: NameNode | None = None

    def child_nodes(self) -> tuple[ParseNode, ...]:
        if self.alias is None:
            return (self.module,)
        return (self.module, self.alias)


@dataclass(frozen=True, slots=True)
class ImportNode(ParseNode):
    kind: ClassVar[str] = "import"

    start: int
    length: int
    imports: tuple[ImportAsNode, ...]

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return self.imports


@dataclass(frozen=True, slots=True)
class ImportFromAsNode(ParseNode):
    """One ``name [as alias]`` clause of a ``from ... import`` statement."""

    kind: ClassVar[str] = "import_from_as"

    start: int
    length: int
    name: NameNode
    alias: NameNode | None = None

    def child_nodes(self) -> tuple[ParseNode, ...]:
        if self.alias is None:
            return (self.name,)
        return (self.name, self.alias)


@dataclass(frozen=True, slots=True)
class ImportFromNode(ParseNode):
    kind: ClassVar[str] = "import_from"

    start: int
    length: int
    module: ModuleNameNode
    imports: tuple[ImportFromAsNode, ...] = ()
    is_wildcard: bool = False

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return (self.module, *self.imports)


@dataclass(frozen=True, slots=True)
class TypeAliasNode(ParseNode):
    """``type Name[params] = expression``; *start* is the ``type`` keyword."""

    kind: ClassVar[str] = "type_alias"

    start: int
    length: int
    name: NameNode
    expression: ParseNode
    type_parameters: tuple[TypeParameterNode, ...] = ()

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return (self.name, *self.type_parameters, self.expression)


@dataclass(frozen=True, slots=True)
class ModuleNode(ParseNode):
    """Root node of a parsed file."""

    kind: ClassVar[str] = "module"

    start: int
    length: int
    statements: tuple[ParseNode, ...]

    def child_nodes(self) -> tuple[ParseNode, ...]:
        return self.statements
