"""Tests for the Python front end: node shapes and character offsets."""

from __future__ import annotations

import pytest

from semtokens.errors import SourceSyntaxError
from semtokens.nodes import (
    ClassNode,
    FunctionNode,
    GenericNode,
    ImportFromNode,
    ImportNode,
    MemberAccessNode,
    ModuleNode,
    NameNode,
    ParameterNode,
    TypeAliasNode,
)
from semtokens.walker import ParseTreeWalker


class _NameCollector(ParseTreeWalker):
    def __init__(self) -> None:
        self.names: list[NameNode] = []

    def visit_name(self, node: NameNode) -> bool:
        self.names.append(node)
        return True


def names_in(tree: ModuleNode) -> list[NameNode]:
    collector = _NameCollector()
    collector.walk(tree)
    return collector.names


def name_at(tree: ModuleNode, source: str, value: str) -> NameNode:
    """The single NameNode for *value*, checked against the source text."""
    matches = [n for n in names_in(tree) if n.value == value]
    assert len(matches) == 1, f"Expected one {value!r}, got {matches}"
    node = matches[0]
    assert source[node.start : node.end] == value
    return node


# ---------------------------------------------------------------------------
# Module and offsets
# ---------------------------------------------------------------------------


class TestModule:
    def test_empty_source(self, parse_source) -> None:
        tree = parse_source("")
        assert tree == ModuleNode(0, 0, ())

    def test_module_spans_source(self, parse_source) -> None:
        source = "x = 1\n"
        tree = parse_source(source)
        assert tree.start == 0
        assert tree.length == len(source)

    def test_name_offsets(self, parse_source) -> None:
        source = "alpha = beta\n"
        tree = parse_source(source)
        assert name_at(tree, source, "alpha").start == 0
        assert name_at(tree, source, "beta").start == 8

    def test_non_ascii_offsets_are_characters(self, parse_source) -> None:
        source = "x = 'é'; y\n"
        tree = parse_source(source)
        assert name_at(tree, source, "y").start == 9

    def test_crlf_line_endings(self, parse_source) -> None:
        source = "a = 1\r\nb = a\r\n"
        tree = parse_source(source)
        second = [n for n in names_in(tree) if n.value == "a"][1]
        assert second.start == source.rindex("a")

    def test_children_in_source_order(self, parse_source) -> None:
        source = "result = yes if cond else no\n"
        values = [n.value for n in names_in(parse_source(source))]
        assert values == ["result", "yes", "cond", "no"]

    def test_dict_keys_and_values_interleaved(self, parse_source) -> None:
        values = [n.value for n in names_in(parse_source("{k1: v1, k2: v2}\n"))]
        assert values == ["k1", "v1", "k2", "v2"]


class TestSyntaxErrors:
    def test_raises_source_syntax_error(self, parse_source) -> None:
        with pytest.raises(SourceSyntaxError) as exc_info:
            parse_source("def (:\n")
        assert exc_info.value.position.line == 1

    def test_error_on_second_line(self, parse_source) -> None:
        with pytest.raises(SourceSyntaxError) as exc_info:
            parse_source("x = 1\nif\n")
        assert exc_info.value.position.line == 2

    def test_null_byte(self, parse_source) -> None:
        with pytest.raises(SourceSyntaxError):
            parse_source("x = 1\0\n")


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class TestClasses:
    def test_class_name_offset(self, parse_source) -> None:
        source = "class  Widget(Base):\n    pass\n"
        [node] = parse_source(source).statements
        assert isinstance(node, ClassNode)
        assert node.name.value == "Widget"
        assert node.name.start == source.index("Widget")
        assert [a.value for a in node.arguments] == ["Base"]

    def test_decorators(self, parse_source) -> None:
        source = "@register\nclass Widget:\n    pass\n"
        [node] = parse_source(source).statements
        assert isinstance(node, ClassNode)
        assert [d.value for d in node.decorators] == ["register"]
        assert node.start == source.index("class")

    def test_keyword_argument_name(self, parse_source) -> None:
        source = "class A(metaclass=Meta):\n    pass\n"
        tree = parse_source(source)
        assert name_at(tree, source, "metaclass").start == 8

    def test_generic_class(self, parse_source) -> None:
        source = "class Box[T: int]:\n    pass\n"
        [node] = parse_source(source).statements
        assert isinstance(node, ClassNode)
        [param] = node.type_parameters
        assert param.name.value == "T"
        assert param.name.start == source.index("T")
        assert isinstance(param.bound, NameNode)
        assert param.bound.value == "int"


class TestFunctions:
    def test_function_name_offset(self, parse_source) -> None:
        source = "def  compute(a, b=1):\n    return a\n"
        [node] = parse_source(source).statements
        assert isinstance(node, FunctionNode)
        assert node.name.start == source.index("compute")
        assert node.is_async is False
        assert node.declaration is not None
        assert node.declaration.is_method is False

    def test_async_def(self, parse_source) -> None:
        source = "@dec\nasync def go():\n    pass\n"
        [node] = parse_source(source).statements
        assert isinstance(node, FunctionNode)
        assert node.is_async is True
        assert node.declaration is not None and node.declaration.is_async
        assert node.name.start == source.index("go")

    def test_method_flag(self, parse_source) -> None:
        source = (
            "class A:\n"
            "    def m(self):\n"
            "        def inner():\n"
            "            pass\n"
            "    if True:\n"
            "        def cond(self):\n"
            "            pass\n"
        )
        [cls] = parse_source(source).statements
        assert isinstance(cls, ClassNode)
        method = cls.suite[0]
        assert isinstance(method, FunctionNode)
        assert method.declaration is not None and method.declaration.is_method
        inner = method.suite[0]
        assert isinstance(inner, FunctionNode)
        assert inner.declaration is not None and not inner.declaration.is_method
        conditional = cls.suite[1]
        assert isinstance(conditional, GenericNode)
        nested = conditional.children[-1]
        assert isinstance(nested, FunctionNode)
        assert nested.declaration is not None and nested.declaration.is_method

    def test_parameters(self, parse_source) -> None:
        source = "def f(a: int, *args, key=None, **kwargs) -> str:\n    pass\n"
        [node] = parse_source(source).statements
        assert isinstance(node, FunctionNode)
        params = [p for p in node.parameters if isinstance(p, ParameterNode)]
        assert [p.name.value for p in params] == ["a", "args", "key", "kwargs"]
        for p in params:
            assert source[p.name.start : p.name.end] == p.name.value
        assert isinstance(params[0].annotation, NameNode)
        assert isinstance(node.return_annotation, NameNode)
        assert node.return_annotation.value == "str"


class TestTypeAlias:
    def test_type_alias(self, parse_source) -> None:
        source = "type Pair[T] = tuple[T, T]\n"
        [node] = parse_source(source).statements
        assert isinstance(node, TypeAliasNode)
        assert node.start == 0
        assert node.name.value == "Pair"
        assert node.name.start == 5
        assert [p.name.value for p in node.type_parameters] == ["T"]

    def test_type_alias_indented(self, parse_source) -> None:
        source = "if True:\n    type X = int\n"
        tree = parse_source(source)
        [stmt] = tree.statements
        assert isinstance(stmt, GenericNode)
        alias = stmt.children[-1]
        assert isinstance(alias, TypeAliasNode)
        assert alias.start == source.index("type")


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


class TestImports:
    def test_dotted_import_with_alias(self, parse_source) -> None:
        source = "import a.bb.c as d\n"
        [node] = parse_source(source).statements
        assert isinstance(node, ImportNode)
        [clause] = node.imports
        assert [p.value for p in clause.module.name_parts] == ["a", "bb", "c"]
        assert [p.start for p in clause.module.name_parts] == [7, 9, 12]
        assert clause.alias is not None
        assert clause.alias.start == 17

    def test_multiple_imports(self, parse_source) -> None:
        source = "import os, sys as system\n"
        [node] = parse_source(source).statements
        assert isinstance(node, ImportNode)
        assert [c.module.name_parts[0].value for c in node.imports] == ["os", "sys"]
        assert node.imports[0].alias is None
        assert node.imports[1].alias is not None
        assert node.imports[1].alias.start == source.index("system")

    def test_alias_equal_to_module(self, parse_source) -> None:
        source = "import as_ as as_\n"
        [node] = parse_source(source).statements
        assert isinstance(node, ImportNode)
        [clause] = node.imports
        assert clause.module.name_parts[0].start == 7
        assert clause.alias is not None
        assert clause.alias.start == 14

    def test_relative_from_import(self, parse_source) -> None:
        source = "from ..pkg import (x as y, z)\n"
        [node] = parse_source(source).statements
        assert isinstance(node, ImportFromNode)
        assert node.module.leading_dots == 2
        assert [p.value for p in node.module.name_parts] == ["pkg"]
        assert node.module.start == 5
        assert [i.name.value for i in node.imports] == ["x", "z"]
        assert node.imports[0].alias is not None
        assert node.imports[0].alias.start == source.index("y")
        assert node.imports[1].name.start == source.index("z")

    def test_dots_only(self, parse_source) -> None:
        [node] = parse_source("from . import mod\n").statements
        assert isinstance(node, ImportFromNode)
        assert node.module.leading_dots == 1
        assert node.module.name_parts == ()

    def test_wildcard(self, parse_source) -> None:
        [node] = parse_source("from m import *\n").statements
        assert isinstance(node, ImportFromNode)
        assert node.is_wildcard is True
        assert node.imports == ()


# ---------------------------------------------------------------------------
# Name positions
# ---------------------------------------------------------------------------


class TestNamePositions:
    def test_attribute_member(self, parse_source) -> None:
        source = "obj.attr\n"
        [access] = parse_source(source).statements
        assert isinstance(access, MemberAccessNode)
        assert access.member.start == 4
        assert access.member.value == "attr"

    def test_global_names(self, parse_source) -> None:
        source = "def f():\n    global count, total\n"
        tree = parse_source(source)
        assert name_at(tree, source, "count").start == source.index("count")
        assert name_at(tree, source, "total").start == source.index("total")

    def test_except_alias(self, parse_source) -> None:
        source = "try:\n    pass\nexcept ValueError as err:\n    pass\n"
        tree = parse_source(source)
        assert name_at(tree, source, "err").start == source.index("err")

    def test_call_keyword(self, parse_source) -> None:
        source = "f(key=1)\n"
        tree = parse_source(source)
        assert name_at(tree, source, "key").start == 2

    def test_match_captures(self, parse_source) -> None:
        source = (
            "match cmd:\n"
            "    case [first, *rest]:\n"
            "        pass\n"
            "    case {'k': v, **others}:\n"
            "        pass\n"
            "    case Point() as pt:\n"
            "        pass\n"
        )
        tree = parse_source(source)
        for value in ("first", "rest", "v", "others", "pt"):
            assert name_at(tree, source, value).start == source.index(value)

    def test_literal_receiver(self, parse_source) -> None:
        source = "'-'.join(parts)\n"
        tree = parse_source(source)
        assert name_at(tree, source, "join").start == 4
        assert name_at(tree, source, "parts").start == 9

    def test_non_ascii_identifier(self, parse_source) -> None:
        source = "café = 1\nprint(café)\n"
        tree = parse_source(source)
        cafes = [n for n in names_in(tree) if n.value == "café"]
        assert [n.start for n in cafes] == [0, 15]


class TestNamesAcrossLines:
    """Aliases and captures separated from their keyword by comments or continuations."""

    def assert_names_match_source(self, tree: ModuleNode, source: str) -> None:
        for node in names_in(tree):
            assert source[node.start : node.end] == node.value, node

    def test_from_import_alias_after_comment(self, parse_source) -> None:
        source = "from m import (a as  # note\n    b)\n"
        tree = parse_source(source)
        [node] = tree.statements
        assert isinstance(node, ImportFromNode)
        [clause] = node.imports
        assert clause.name.start == source.index("a")
        assert clause.alias is not None
        assert source[clause.alias.start : clause.alias.end] == "b"
        self.assert_names_match_source(tree, source)

    def test_import_alias_after_continuation(self, parse_source) -> None:
        source = "import os as \\\n o\n"
        tree = parse_source(source)
        [node] = tree.statements
        assert isinstance(node, ImportNode)
        [clause] = node.imports
        assert clause.alias is not None
        assert clause.alias.start == source.rindex("o")
        self.assert_names_match_source(tree, source)

    def test_dotted_import_split_over_lines(self, parse_source) -> None:
        source = "from pkg.sub import (\n    first,  # one\n    second as alt,\n)\n"
        tree = parse_source(source)
        [node] = tree.statements
        assert isinstance(node, ImportFromNode)
        assert [p.value for p in node.module.name_parts] == ["pkg", "sub"]
        assert [i.name.value for i in node.imports] == ["first", "second"]
        self.assert_names_match_source(tree, source)

    def test_match_capture_after_comment(self, parse_source) -> None:
        source = "match p:\n    case (x as  # c\n          y):\n        pass\n"
        tree = parse_source(source)
        assert name_at(tree, source, "y").start == source.index("y")
        self.assert_names_match_source(tree, source)

    def test_except_alias_after_continuation(self, parse_source) -> None:
        source = "try:\n    pass\nexcept (OSError) as \\\n        err:\n    pass\n"
        tree = parse_source(source)
        assert name_at(tree, source, "err").start == source.index("err")
        self.assert_names_match_source(tree, source)

    def test_global_names_with_continuation(self, parse_source) -> None:
        source = "def f():\n    global alpha, \\\n        beta\n"
        tree = parse_source(source)
        assert name_at(tree, source, "beta").start == source.index("beta")
        self.assert_names_match_source(tree, source)


class TestFutureImport:
    def test_future_import(self, parse_source) -> None:
        source = "from __future__ import annotations\n"
        [node] = parse_source(source).statements
        assert isinstance(node, ImportFromNode)
        assert [p.value for p in node.module.name_parts] == ["__future__"]
        assert node.module.start == 5
        assert [i.name.value for i in node.imports] == ["annotations"]
