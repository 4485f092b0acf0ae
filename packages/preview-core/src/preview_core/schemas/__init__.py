"""Data models for catalog-preview.

This package provides:
- Node, FactSet, TrustedInformation: node identity and facts
- CompileOptions, CompileRequest: request surface
- CompileResult: baseline + preview catalogs
"""

from __future__ import annotations

from preview_core.schemas.node import FactSet, Node, TrustedInformation
from preview_core.schemas.request import CompileOptions, CompileRequest
from preview_core.schemas.result import CompileResult

__all__: list[str] = [
    "Node",
    "FactSet",
    "TrustedInformation",
    "CompileOptions",
    "CompileRequest",
    "CompileResult",
]
