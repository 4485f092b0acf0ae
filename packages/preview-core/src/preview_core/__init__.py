"""preview-core: Baseline and preview catalog compilation.

This package provides:
- DiffCompiler: Compile a node's catalog in its assigned environment and
  in a preview environment, returning both
- DualCompiler, NodeResolver, FactIngestor, ServerFactCache: the pieces
  DiffCompiler is built from
- MigrationChecker: Optional issue collection during the preview pass
- Error types and runtime configuration
"""

from __future__ import annotations

__version__ = "0.1.0"

from preview_core.compiler import (
    CompilationContext,
    CompilerBackend,
    DiffCompiler,
    DualCompiler,
    NodeResolver,
    Phase,
)
from preview_core.config import PreviewConfig, load_config
from preview_core.errors import (
    ArgumentError,
    CompilationError,
    ConfigurationError,
    ConsistencyError,
    MigrationIssuesError,
    PermissionDeniedError,
    PreviewError,
)
from preview_core.facts import FactIngestor, ServerFactCache
from preview_core.log_destinations import CONSOLE, LogDestinations
from preview_core.migration import MigrationChecker
from preview_core.schemas import (
    CompileOptions,
    CompileRequest,
    CompileResult,
    FactSet,
    Node,
    TrustedInformation,
)

__all__ = [
    "__version__",
    # Compiler
    "DiffCompiler",
    "DualCompiler",
    "NodeResolver",
    "CompilationContext",
    "CompilerBackend",
    "Phase",
    # Facts
    "FactIngestor",
    "ServerFactCache",
    # Logging
    "LogDestinations",
    "CONSOLE",
    # Migration
    "MigrationChecker",
    # Config
    "PreviewConfig",
    "load_config",
    # Errors
    "PreviewError",
    "ArgumentError",
    "ConfigurationError",
    "ConsistencyError",
    "PermissionDeniedError",
    "CompilationError",
    "MigrationIssuesError",
    # Schemas
    "Node",
    "FactSet",
    "TrustedInformation",
    "CompileOptions",
    "CompileRequest",
    "CompileResult",
]
