"""Fact storage and node lookup collaborators.

- FactStore: where ingested facts are saved, keyed by node name
- NodeFinder: node-information service consulted by the NodeResolver
- MemoryFactStore / PlainNodeFinder: in-process implementations; the
  finder builds nodes from whatever facts the store holds, so facts
  ingested for a request are visible to the lookup that follows
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog

from preview_core.schemas.node import FactSet, Node

logger = structlog.get_logger(__name__)


@runtime_checkable
class FactStore(Protocol):
    """Persists node facts."""

    def save(
        self,
        facts: FactSet,
        *,
        environment: str | None,
        transaction_uuid: str | None,
    ) -> None: ...

    def find(self, name: str) -> FactSet | None: ...


@runtime_checkable
class NodeFinder(Protocol):
    """Looks up node information by name."""

    def find(
        self,
        name: str,
        *,
        environment: str | None,
        transaction_uuid: str | None,
    ) -> Node | None: ...


class MemoryFactStore:
    """FactStore keeping the latest FactSet per node in memory."""

    def __init__(self) -> None:
        self._facts: dict[str, FactSet] = {}

    def save(
        self,
        facts: FactSet,
        *,
        environment: str | None,
        transaction_uuid: str | None,
    ) -> None:
        self._facts[facts.name] = facts
        logger.debug(
            "facts_saved",
            node=facts.name,
            environment=environment,
            transaction_uuid=transaction_uuid,
            count=len(facts.values),
        )

    def find(self, name: str) -> FactSet | None:
        return self._facts.get(name)


class PlainNodeFinder:
    """NodeFinder that builds a node from stored facts.

    Every name resolves to a node. The environment is the one requested,
    else the ``environment`` fact reported by the node, else
    ``default_environment``.

    Example:
        >>> store = MemoryFactStore()
        >>> finder = PlainNodeFinder(store, default_environment="production")
        >>> finder.find("web01", environment=None, transaction_uuid=None).environment
        'production'
    """

    def __init__(self, fact_store: FactStore, default_environment: str = "production") -> None:
        self.fact_store = fact_store
        self.default_environment = default_environment

    def find(
        self,
        name: str,
        *,
        environment: str | None,
        transaction_uuid: str | None,
    ) -> Node | None:
        stored = self.fact_store.find(name)
        facts = dict(stored.values) if stored else {}
        node_env = environment or facts.get("environment") or self.default_environment
        return Node(name=name, environment=node_env, facts=facts)
