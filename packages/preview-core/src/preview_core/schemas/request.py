"""Compile request and options models.

CompileOptions mirrors the options a caller can attach to a baseline +
preview compile request. CompileRequest carries the addressing data (key,
connected node, environment, transport origin) alongside the options.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from preview_core.schemas.node import FactSet, Node, TrustedInformation

if TYPE_CHECKING:
    from preview_core.migration.checker import MigrationChecker


class CompileOptions(BaseModel):
    """Options recognized by the dual compiler.

    Attributes:
        facts: Inline fact payload (encoded text, or an already decoded FactSet).
        facts_format: Encoding of ``facts`` ("json", "yaml", ...).
        transaction_uuid: Caller supplied transaction id, passed to collaborators.
        use_node: Pre-resolved node. Honored for local requests only.
        preview_environment: Environment for the preview pass.
        baseline_log: Log destination for the baseline pass.
        preview_log: Log destination for the preview pass.
        migration_checker: Optional migration checker enabled for the preview pass.

    Example:
        >>> options = CompileOptions(
        ...     preview_environment="prod_v2",
        ...     baseline_log="/tmp/b.log",
        ...     preview_log="/tmp/p.log",
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    facts: str | FactSet | None = Field(default=None, description="Inline fact payload")
    facts_format: str | None = Field(default=None, description="Fact payload encoding")
    transaction_uuid: str | None = Field(default=None, description="Transaction id")
    use_node: Node | None = Field(default=None, description="Pre-resolved node (local only)")
    preview_environment: str | None = Field(default=None, description="Preview environment")
    baseline_log: str | None = Field(default=None, description="Baseline log destination")
    preview_log: str | None = Field(default=None, description="Preview log destination")
    migration_checker: Any = Field(default=None, description="Optional migration checker")

    @property
    def checker(self) -> MigrationChecker | None:
        """The migration checker, typed."""
        return self.migration_checker  # type: ignore[no-any-return]


class CompileRequest(BaseModel):
    """A request to compile baseline and preview catalogs for one node.

    Attributes:
        key: Name of the node whose catalog is requested.
        node: Name of the connected (authenticated) node.
        environment: Environment requested by the caller, passed to lookups.
        remote: True when the request arrived over a network transport.
        options: Compile options.
        trusted_information: Authentication-derived identity, if known.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str | None = Field(default=None, description="Requested node name")
    node: str | None = Field(default=None, description="Connected node name")
    environment: str | None = Field(default=None, description="Requested environment")
    remote: bool = Field(default=False, description="Request came over the network")
    options: CompileOptions = Field(default_factory=CompileOptions)
    trusted_information: TrustedInformation | None = Field(default=None)

    @property
    def target(self) -> str | None:
        """Node the request targets: the key, else the connected node."""
        return self.key or self.node
