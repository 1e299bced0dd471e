#!/usr/bin/env python3
"""
Split a rendered multi-lecture beamer document into per-lecture sources.

Each ``\\lecture{title}{label}`` in the input becomes a folder
``<label>-<slug>/`` holding a presentation and a handout variant. Optionally
the variants are compiled, the handouts bundled into one PDF, and a combined
article written. Defaults are loaded from `lecture_export.defaults.yaml` (next
to this script) and can be overridden via `--config`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from lecture_article import DEFAULT_DOCUMENTCLASS, article_path, write_article
from lecture_build import (
    DEFAULT_FAST_COMMAND,
    DEFAULT_FULL_COMMAND,
    DEFAULT_TIMEOUT_SECONDS,
    LatexCompiler,
    bundle_pdfs,
    compile_all,
    compile_artifact,
    describe_command,
)
from lecture_errors import ConfigurationError, DirectoryCollisionError, ExportError
from lecture_model import DateValue, ExportContext, Part
from lecture_parts import extract_parts, select_parts
from lecture_variants import check_suffixes, materialize, output_directory_name, prepare_template

DEFAULT_CONFIG_PATH = Path(__file__).with_suffix(".defaults.yaml")

PATH_KEYS = {"input", "output_dir", "output"}

FALLBACK_DEFAULTS: Dict[str, Any] = {
    "input": None,
    "output_dir": None,
    "part": 0,
    "always_all_parts": False,
    "handout": True,
    "presentation_suffix": "-beamer",
    "handout_suffix": "",
    "dates": [],
    "date_format": "%d %B %Y",
    "compile": False,
    "fast": False,
    "compiler": {
        "full": DEFAULT_FULL_COMMAND,
        "fast": DEFAULT_FAST_COMMAND,
        "timeout": DEFAULT_TIMEOUT_SECONDS,
    },
    "article": {
        "enabled": False,
        "subdir": "article",
        "suffix": "-article",
        "documentclass": DEFAULT_DOCUMENTCLASS,
    },
    "bundle": {
        "enabled": False,
        "output": None,
    },
}


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.expanduser().open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        return {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration at {path} must be a mapping, got {type(data).__name__}")
    return data


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def convert_paths(section: Dict[str, Any], path_keys: Iterable[str], base_dir: Path) -> Dict[str, Any]:
    converted: Dict[str, Any] = {}
    path_keys_set = set(path_keys)
    for key, value in section.items():
        if isinstance(value, dict):
            converted[key] = convert_paths(value, path_keys_set, base_dir)
            continue
        if key in path_keys_set:
            if value in (None, ""):
                converted[key] = None
                continue
            path_value = Path(value).expanduser() if not isinstance(value, Path) else value
            if not path_value.is_absolute():
                path_value = (base_dir / path_value).resolve()
            converted[key] = path_value
        else:
            converted[key] = value
    return converted


def configure_logging(verbose: bool) -> None:
    log_level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(format="%(levelname)s: %(message)s", level=log_level)


def parse_date(value: Any) -> DateValue:
    """Keep YAML dates, turn ISO strings into dates and leave other text as written."""
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split a rendered beamer document into per-lecture presentation and handout sources."
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to a YAML file overriding lecture_export.defaults.yaml.",
    )
    parser.add_argument(
        "--in",
        dest="input",
        help="Rendered .tex document containing \\lecture{title}{label} markers.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        help="Rendered .tex document (same as --in).",
    )
    parser.add_argument(
        "--out",
        dest="output_dir",
        help="Directory for the per-lecture folders (default: next to the input).",
    )
    parser.add_argument(
        "--part",
        type=int,
        help="Export only the N-th lecture (1-based); 0 exports all.",
    )
    parser.add_argument(
        "--all",
        dest="always_all_parts",
        action="store_true",
        default=None,
        help="Export every lecture regardless of --part or the config.",
    )
    parser.add_argument(
        "--date",
        dest="dates",
        action="append",
        help="Date of the next lecture in document order (repeatable, overrides config dates).",
    )
    parser.add_argument(
        "--handout",
        dest="handout",
        action="store_true",
        help="Write handout variants (overrides config).",
    )
    parser.add_argument(
        "--no-handout",
        dest="handout",
        action="store_false",
        help="Skip handout variants.",
    )
    parser.add_argument(
        "--compile",
        dest="compile",
        action="store_true",
        help="Compile the generated sources after writing them.",
    )
    parser.add_argument(
        "--no-compile",
        dest="compile",
        action="store_false",
        help="Only write the sources.",
    )
    parser.add_argument(
        "--fast",
        dest="fast",
        action="store_true",
        default=None,
        help="Single pdflatex pass instead of a full latexmk build.",
    )
    parser.add_argument(
        "--article",
        dest="article",
        action="store_true",
        default=None,
        help="Also write the combined article.",
    )
    parser.add_argument(
        "--bundle",
        dest="bundle",
        action="store_true",
        default=None,
        help="Merge the compiled handouts into one PDF.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the lectures and planned outputs without writing anything.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )
    parser.set_defaults(handout=None, compile=None)
    return parser


def resolve_settings(args: argparse.Namespace, default_config_path: Path = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    default_config = load_yaml(default_config_path) if default_config_path.exists() else {}
    user_config_path = Path(args.config).expanduser() if args.config else None
    if user_config_path and not user_config_path.exists():
        raise ConfigurationError(f"Config file not found: {user_config_path}")
    user_config = load_yaml(user_config_path) if user_config_path else {}
    user_base = user_config_path.parent if user_config_path else Path.cwd()

    settings = deep_merge(FALLBACK_DEFAULTS, convert_paths(default_config, PATH_KEYS, default_config_path.parent))
    settings = deep_merge(settings, convert_paths(user_config, PATH_KEYS, user_base))

    overrides: Dict[str, Any] = {}
    source = args.input or args.source
    if source:
        overrides["input"] = source
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    settings = deep_merge(settings, convert_paths(overrides, PATH_KEYS, Path.cwd()))

    for key in ("part", "always_all_parts", "handout", "compile", "fast", "dates"):
        value = getattr(args, key)
        if value is not None:
            settings[key] = value
    if args.article is not None:
        settings["article"] = dict(settings["article"], enabled=args.article)
    if args.bundle is not None:
        settings["bundle"] = dict(settings["bundle"], enabled=args.bundle)
    return settings


def resolve_selector(settings: Dict[str, Any]) -> int:
    if settings.get("always_all_parts"):
        return 0
    value = settings.get("part")
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"part must be an integer, got {value!r}") from exc


def read_document(settings: Dict[str, Any]) -> Path:
    source = settings.get("input")
    if not source:
        raise ConfigurationError("No input document given; pass --in <file.tex> or set input in the config.")
    source = Path(source)
    if not source.is_file():
        raise ConfigurationError(f"Input document not found: {source}")
    return source


def print_plan(parts, context: ExportContext, include_handout: bool, compiler: Optional[LatexCompiler], fast: bool) -> None:
    planned: Dict[str, Part] = {}
    for part in parts:
        name = output_directory_name(part)
        earlier = planned.get(name)
        if earlier is not None:
            raise DirectoryCollisionError(
                f"Lecture {part.index} ({part.label!r}, {part.title!r}) and lecture {earlier.index} "
                f"({earlier.label!r}, {earlier.title!r}) both map to directory {name!r}."
            )
        planned[name] = part
        directory = context.output_dir / name
        print(f"[{part.index}] {part.label}: {part.title}")
        files: List[Path] = [directory / f"{name}{context.presentation_suffix}.tex"]
        if include_handout:
            files.append(directory / f"{name}{context.handout_suffix}.tex")
        for path in files:
            print(f"    {path}")
            if compiler is not None:
                print(f"    $ {describe_command(compiler.command_for(path, fast))}")


def main(argv: Iterable[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    settings = resolve_settings(args)
    source = read_document(settings)
    try:
        document = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to read {source}: {exc}") from exc

    output_dir = Path(settings.get("output_dir") or source.parent)
    dates = [parse_date(value) for value in settings.get("dates") or []]
    parts = extract_parts(document, dates)
    selected = select_parts(parts, resolve_selector(settings))
    if not parts:
        print(f"[WARN] No \\lecture markers found in {source}")

    context = ExportContext(
        output_dir=output_dir,
        presentation_suffix=str(settings.get("presentation_suffix") or ""),
        handout_suffix=str(settings.get("handout_suffix") or ""),
        date_format=str(settings.get("date_format") or "%Y-%m-%d"),
    )
    include_handout = bool(settings.get("handout", True))
    fast = bool(settings.get("fast"))
    compiler_conf = settings.get("compiler") or {}
    compiler = None
    if settings.get("compile"):
        compiler = LatexCompiler(
            full_command=compiler_conf.get("full") or DEFAULT_FULL_COMMAND,
            fast_command=compiler_conf.get("fast") or DEFAULT_FAST_COMMAND,
            timeout=compiler_conf.get("timeout"),
        )

    if args.dry_run:
        check_suffixes(context, include_handout)
        print_plan(selected, context, include_handout, compiler, fast)
        return 0

    template = prepare_template(document)
    materialize(selected, template, context, include_handout)
    print(f"[INFO] Wrote {len(context.artifacts)} lecture source(s) under {output_dir}")

    article_conf = settings.get("article") or {}
    article_file: Optional[Path] = None
    if article_conf.get("enabled"):
        context.current_date = parts[0].date if parts else None
        article_file = write_article(
            document,
            article_path(
                output_dir,
                str(article_conf.get("subdir") or "article"),
                source.stem,
                str(article_conf.get("suffix") or ""),
            ),
            str(article_conf.get("documentclass") or DEFAULT_DOCUMENTCLASS),
            context.formatted_date(),
        )
        print(f"[INFO] Article → {article_file}")

    if compiler is None:
        return 0

    last_presentation = compile_all(context.build_queue, include_handout, compiler, fast, context)
    print(f"[INFO] Final presentation PDF → {last_presentation}")
    if article_file is not None:
        result = compile_artifact(compiler, article_file, fast, context)
        print(f"[INFO] Article PDF → {result.output}")

    bundle_conf = settings.get("bundle") or {}
    if bundle_conf.get("enabled"):
        handout_sources = {pair.handout for pair in context.build_queue if pair.handout is not None}
        handout_pdfs = [result.output for result in context.results if result.ok and result.source in handout_sources]
        bundle_output = bundle_conf.get("output") or output_dir / f"{source.stem}-handouts.pdf"
        bundle_pdfs(handout_pdfs, Path(bundle_output))
        print(f"[INFO] Handout bundle → {bundle_output}")
    return 0


def cli() -> int:
    try:
        return main()
    except ExportError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(cli())
