"""Node, fact and trusted-identity models.

This module defines the data a compilation runs against:
- Node: The managed node (name, environment, trusted data, facts)
- FactSet: A set of facts reported by (or on behalf of) one node
- TrustedInformation: Authentication-derived identity of the requester

Node is mutable: the same instance is compiled twice and its
environment is repointed at the preview environment for the second pass.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class FactSet(BaseModel):
    """Facts reported for a single node.

    Attributes:
        name: Name of the node owning these facts.
        values: Fact name to fact value mapping.
        timestamp: When the facts were collected.

    Example:
        >>> facts = FactSet(name="web01", values={"os": "linux"})
        >>> facts.values["os"]
        'linux'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Owning node name")
    values: dict[str, Any] = Field(default_factory=dict, description="Fact values")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Collection time",
    )


class Node(BaseModel):
    """A managed node as seen by the compiler.

    Attributes:
        name: Node identity (certificate name).
        environment: Environment the node compiles against. Mutable; the
            dual compiler repoints it for the preview pass.
        trusted_data: Authentication-derived data, assigned once per request.
        facts: Fact mapping. Server facts and submitted facts are merged in.

    Example:
        >>> node = Node(name="web01", environment="production")
        >>> node.merge({"serverversion": "1.0.0"})
        >>> node.facts
        {'serverversion': '1.0.0'}
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Node name")
    environment: str | None = Field(default=None, description="Current environment")
    trusted_data: dict[str, Any] = Field(default_factory=dict, description="Trusted data")
    facts: dict[str, Any] = Field(default_factory=dict, description="Node facts")

    def merge(self, values: Mapping[str, Any]) -> None:
        """Merge facts into the node without overwriting existing keys.

        Args:
            values: Facts to add. Keys already present on the node win.
        """
        for key, value in values.items():
            self.facts.setdefault(key, value)


class TrustedInformation(BaseModel):
    """Authentication-derived identity of the requesting party.

    Attributes:
        authenticated: How the identity was established ("remote", "local").
        certname: Certificate name of the requester.
        extensions: Certificate extensions.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    authenticated: str = Field(default="local", description="Authentication kind")
    certname: str | None = Field(default=None, description="Certificate name")
    extensions: dict[str, Any] = Field(default_factory=dict, description="Extensions")

    @classmethod
    def local(cls, node: Node) -> Self:
        """Trusted information for an in-process (local) compile of ``node``."""
        return cls(authenticated="local", certname=node.name)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
