"""preview compile command - compile baseline and preview catalogs.

Writes baseline_catalog.json and preview_catalog.json to the output
directory.
"""

from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from preview_cli.errors import EXIT_SYSTEM_ERROR, EXIT_USER_ERROR, CLIError
from preview_cli.output import success, warning

if TYPE_CHECKING:
    from preview_core import CompilerBackend, FactSet

BASELINE_FILE_NAME = "baseline_catalog.json"
PREVIEW_FILE_NAME = "preview_catalog.json"

# Fact file suffix -> fact format
FACT_FORMATS_BY_SUFFIX = {
    ".json": "json",
    ".pson": "pson",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def load_backend(spec: str) -> CompilerBackend:
    """Import a compiler backend from ``module:attribute``.

    Classes are instantiated with no arguments; any other object is used as is.

    Raises:
        CLIError: The value is not module:attribute, the import fails, or the object has
            no ``compile`` method.
    """
    module_name, sep, attr_name = spec.partition(":")
    if not sep or not module_name or not attr_name:
        raise CLIError(f"Invalid backend '{spec}', expected 'module:attribute'", EXIT_USER_ERROR)

    try:
        module = importlib.import_module(module_name)
        backend = getattr(module, attr_name)
    except (ImportError, AttributeError) as e:
        raise CLIError(f"Cannot load backend '{spec}': {e}", EXIT_SYSTEM_ERROR) from None

    if isinstance(backend, type):
        backend = backend()
    if not callable(getattr(backend, "compile", None)):
        raise CLIError(f"Backend '{spec}' has no compile() method", EXIT_USER_ERROR)
    return backend  # type: ignore[no-any-return]


def read_facts(path: Path, facts_format: str | None) -> FactSet:
    """Decode a fact file, inferring the format from its suffix if not given."""
    from preview_core.facts import FormatFactDecoder

    fmt = facts_format or FACT_FORMATS_BY_SUFFIX.get(path.suffix.lower())
    if fmt is None:
        raise CLIError(f"Cannot infer fact format of {path}; use --facts-format")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CLIError(f"Cannot read facts from {path}: {e}", EXIT_USER_ERROR) from None
    return FormatFactDecoder().decode(fmt, content)


def _to_jsonable(catalog: Any) -> Any:
    if hasattr(catalog, "model_dump"):
        return catalog.model_dump(mode="json")
    if hasattr(catalog, "to_dict"):
        return catalog.to_dict()
    return catalog


def write_catalog(path: Path, catalog: Any) -> None:
    path.write_text(json.dumps(_to_jsonable(catalog), indent=2, default=str))


@click.command("compile")
@click.argument("node_name")
@click.option(
    "-p",
    "--preview-env",
    "preview_environment",
    required=True,
    help="Environment to compile the preview catalog in",
)
@click.option(
    "-e",
    "--environment",
    default=None,
    help="Baseline environment [default: assigned by node lookup]",
)
@click.option(
    "-b",
    "--backend",
    "backend_spec",
    required=True,
    help="Compiler backend as module:attribute",
)
@click.option(
    "--facts",
    "facts_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Fact file to submit for the node (json or yaml)",
)
@click.option("--facts-format", default=None, help="Format of --facts [default: from suffix]")
@click.option("--baseline-log", type=click.Path(), default=None, help="Baseline pass log file")
@click.option("--preview-log", type=click.Path(), default=None, help="Preview pass log file")
@click.option("--migrate", is_flag=True, default=False, help="Enable migration checking")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default=".preview/",
    help="Output directory [default: .preview/]",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to preview.yaml",
)
def compile_cmd(
    node_name: str,
    preview_environment: str,
    environment: str | None,
    backend_spec: str,
    facts_path: str | None,
    facts_format: str | None,
    baseline_log: str | None,
    preview_log: str | None,
    migrate: bool,
    output_path: str,
    config_path: str | None,
) -> None:
    """Compile baseline and preview catalogs for NODE_NAME.

    Examples:

        preview compile web01 -p prod_v2 -b mybackend:Compiler

        preview compile web01 -p prod_v2 -b mybackend:Compiler --migrate \\
            --baseline-log b.log --preview-log p.log
    """
    # Import here to avoid heavy imports at CLI startup
    from preview_core import (
        CompileOptions,
        CompileRequest,
        DiffCompiler,
        MigrationChecker,
        PreviewError,
        load_config,
    )

    backend = load_backend(backend_spec)
    output = Path(output_path)
    checker = MigrationChecker() if migrate else None

    try:
        config = load_config(config_path)
        facts = read_facts(Path(facts_path), facts_format) if facts_path else None
        request = CompileRequest(
            key=node_name,
            environment=environment,
            options=CompileOptions(
                facts=facts,
                facts_format=facts_format or ("json" if facts else None),
                preview_environment=preview_environment,
                baseline_log=baseline_log,
                preview_log=preview_log,
                migration_checker=checker,
            ),
        )
        result = DiffCompiler(backend, config=config).find(request)
    except PreviewError as e:
        raise CLIError(f"Compilation failed: {e}", EXIT_USER_ERROR) from None

    try:
        output.mkdir(parents=True, exist_ok=True)
        write_catalog(output / BASELINE_FILE_NAME, result.baseline)
        write_catalog(output / PREVIEW_FILE_NAME, result.preview)
    except OSError as e:
        raise CLIError(f"Cannot write to: {output_path} ({e})", EXIT_SYSTEM_ERROR) from None

    if checker is not None and len(checker.acceptor):
        warning(f"{len(checker.acceptor)} migration issue(s) reported; see the preview log")

    success(
        f"Compiled {node_name} in {result.baseline_environment} and "
        f"{result.preview_environment} to {output}"
    )
