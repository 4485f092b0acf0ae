"""Compiler module for catalog-preview.

This module exports the orchestration classes:
- DiffCompiler: Request entry point (facts -> node -> both compiles)
- DualCompiler: Baseline + preview compile with isolated log destinations
- NodeResolver: Request -> Node
- CompilationContext, CompilerBackend, Phase: Backend contract
- overrides, lookup: Scoped override values
"""

from __future__ import annotations

from preview_core.compiler.context import (
    CompilationContext,
    CompilerBackend,
    Phase,
    current_labels,
    current_overrides,
    lookup,
    overrides,
)
from preview_core.compiler.diff_compiler import DiffCompiler
from preview_core.compiler.dual_compiler import PREVIEW_SCOPE_LABEL, DualCompiler
from preview_core.compiler.resolver import NodeResolver

__all__: list[str] = [
    "DiffCompiler",
    "DualCompiler",
    "NodeResolver",
    "CompilationContext",
    "CompilerBackend",
    "Phase",
    "PREVIEW_SCOPE_LABEL",
    "overrides",
    "lookup",
    "current_overrides",
    "current_labels",
]
