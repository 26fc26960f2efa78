"""Type model and evaluator interface consumed by the classifier.

The type engine itself lives outside this package. It reports types through
the closed ``Type`` record below: one ``TypeCategory`` plus an explicit
``is_instance`` flag separating values of a type from references to the type
itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from semtokens.nodes import ParseNode


class TypeCategory(Enum):
    FUNCTION = auto()
    OVERLOADED_FUNCTION = auto()
    MODULE = auto()
    UNBOUND = auto()
    UNKNOWN = auto()
    TYPE_VAR = auto()
    UNION = auto()
    CLASS = auto()
    NEVER = auto()


@dataclass(frozen=True, slots=True)
class FunctionDeclaration:
    """Declaration facts of a function."""

    is_method: bool = False
    is_async: bool = False


@dataclass(frozen=True, slots=True)
class Type:
    """An inferred type as reported by the type engine.

    ``declaration`` is only meaningful for FUNCTION, ``overloads`` only for
    OVERLOADED_FUNCTION. ``name`` is informational.
    """

    category: TypeCategory
    is_instance: bool = True
    declaration: FunctionDeclaration | None = None
    overloads: tuple[Type, ...] = ()
    name: str = ""

    @property
    def is_instantiable(self) -> bool:
        return not self.is_instance

    @classmethod
    def function(
        cls,
        declaration: FunctionDeclaration | None = None,
        *,
        instance: bool = True,
        name: str = "",
    ) -> Type:
        return cls(TypeCategory.FUNCTION, instance, declaration=declaration, name=name)

    @classmethod
    def overloaded(cls, *overloads: Type, instance: bool = True, name: str = "") -> Type:
        return cls(TypeCategory.OVERLOADED_FUNCTION, instance, overloads=overloads, name=name)

    @classmethod
    def module(cls, name: str = "") -> Type:
        return cls(TypeCategory.MODULE, True, name=name)

    @classmethod
    def class_(cls, name: str = "", *, instance: bool = False) -> Type:
        return cls(TypeCategory.CLASS, instance, name=name)

    @classmethod
    def type_var(cls, name: str = "", *, instance: bool = False) -> Type:
        return cls(TypeCategory.TYPE_VAR, instance, name=name)

    @classmethod
    def union(cls, name: str = "", *, instance: bool = True) -> Type:
        return cls(TypeCategory.UNION, instance, name=name)

    @classmethod
    def never(cls) -> Type:
        # The engine flags Never as both instance and instantiable; the
        # record can only hold one, and callers must not rely on it.
        return cls(TypeCategory.NEVER, True, name="Never")

    @classmethod
    def unknown(cls) -> Type:
        return cls(TypeCategory.UNKNOWN, True)

    @classmethod
    def unbound(cls) -> Type:
        return cls(TypeCategory.UNBOUND, True)


@dataclass(eq=False, slots=True)
class Symbol:
    """A binding. Compared by identity; facts about it come from the evaluator."""

    name: str


@dataclass(frozen=True, slots=True)
class SymbolWithScope:
    symbol: Symbol
    is_outer_scope: bool = False


@dataclass(frozen=True, slots=True)
class DeclaredType:
    """Explicitly declared type of a symbol; ``type`` is None when undeclared."""

    type: Type | None = None


class TypeEvaluator(Protocol):
    """Read-only view of the type engine used during one traversal."""

    def get_type(self, node: ParseNode) -> Type | None: ...

    def look_up_symbol_recursive(
        self, node: ParseNode, name: str, is_outer_scope: bool
    ) -> SymbolWithScope | None: ...

    def get_declared_type_of_symbol(self, symbol: Symbol) -> DeclaredType: ...

    def is_final_variable(self, symbol: Symbol) -> bool: ...

