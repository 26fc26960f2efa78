"""Command-line interface for semtokens."""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
import tomllib
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from semtokens.errors import EvaluatorLoadError, SourceSyntaxError
from semtokens.nodes import ModuleNode
from semtokens.tokens import SemanticTokenItem
from semtokens.types import TypeEvaluator

logger = logging.getLogger(__name__)

EvaluatorFactory = Callable[[ModuleNode, str], TypeEvaluator]

OUTPUT_FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    evaluator: str | None
    output_format: str
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="semtokens",
        description="Print the semantic tokens of a Python file",
    )
    p.add_argument("input", help="Input .py file")
    p.add_argument(
        "--evaluator",
        metavar="MODULE:ATTR",
        help="Type evaluator factory (default: syntactic classification only)",
    )
    p.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: text)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover semtokens.toml)",
    )
    p.add_argument("--debug", action="store_true", help="Dump parse tree to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "semtokens.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    evaluator: str | None = None
    cfg_evaluator = config.get("evaluator")
    if isinstance(cfg_evaluator, dict):
        factory = cfg_evaluator.get("factory")
        if isinstance(factory, str):
            evaluator = factory
    if args.evaluator:
        evaluator = args.evaluator

    output_format = "text"
    cfg_output = config.get("output")
    if isinstance(cfg_output, dict):
        cfg_format = cfg_output.get("format")
        if cfg_format in OUTPUT_FORMATS:
            output_format = cfg_format
    if args.format is not None:
        output_format = args.format

    return CliOptions(
        input_file=input_file,
        evaluator=evaluator,
        output_format=output_format,
        debug=args.debug,
        verbose=args.verbose,
    )


def load_evaluator_factory(target: str) -> EvaluatorFactory:
    """Resolve a ``module:attribute`` string to an evaluator factory."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise EvaluatorLoadError(target, "expected MODULE:ATTR")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise EvaluatorLoadError(target, str(exc)) from exc
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exc:
            raise EvaluatorLoadError(target, f"no attribute {attr!r}") from exc
    if not callable(obj):
        raise EvaluatorLoadError(target, "not callable")
    return obj


def collect_file(options: CliOptions) -> tuple[str, list[SemanticTokenItem]]:
    """Read and parse a Python file, returning its source and semantic tokens."""
    from semtokens.debug import dump_tree
    from semtokens.parser import parse
    from semtokens.semantic_tokens import collect_semantic_tokens

    factory = load_evaluator_factory(options.evaluator) if options.evaluator else None

    source = options.input_file.read_text(encoding="utf-8")
    tree = parse(source, str(options.input_file))

    if options.debug:
        dump_tree(tree, file=sys.stderr)

    evaluator = factory(tree, source) if factory is not None else None
    items = collect_semantic_tokens(tree, evaluator)
    logger.debug("%s: %d semantic tokens", options.input_file, len(items))
    return source, items


def write_tokens(items: list[SemanticTokenItem], source: str, output_format: str) -> None:
    from semtokens.debug import dump_tokens, tokens_as_json

    if output_format == "json":
        json.dump(tokens_as_json(items, source), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        dump_tokens(items, source, file=sys.stdout)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        options = resolve_options(args)
    except tomllib.TOMLDecodeError as exc:
        print(f"error: invalid config: {exc}", file=sys.stderr)
        return 2

    try:
        source, items = collect_file(options)
    except SourceSyntaxError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except (EvaluatorLoadError, OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    write_tokens(items, source, options.output_format)
    return 0
