"""CompileResult: the pair of catalogs returned to the caller."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CompileResult(BaseModel):
    """Baseline and preview catalogs compiled for one node.

    Catalogs are opaque; they are threaded through without inspection.

    Attributes:
        baseline: Catalog compiled in the node's assigned environment.
        preview: Catalog compiled in the preview environment.
        baseline_environment: Environment used for the baseline pass.
        preview_environment: Environment used for the preview pass.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    baseline: Any = Field(..., description="Baseline catalog")
    preview: Any = Field(..., description="Preview catalog")
    baseline_environment: str | None = Field(default=None)
    preview_environment: str = Field(..., min_length=1)
