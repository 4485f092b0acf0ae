"""Resolve a compile request to the node it targets.

Authorization of which connected node may compile which catalog happens
upstream. A request without a key compiles the connected node itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from preview_core.errors import ArgumentError, CompilationError, PermissionDeniedError
from preview_core.observability import span

if TYPE_CHECKING:
    from preview_core.facts.server_facts import ServerFactCache
    from preview_core.facts.store import NodeFinder
    from preview_core.schemas.node import Node
    from preview_core.schemas.request import CompileRequest

logger = structlog.get_logger(__name__)


class NodeResolver:
    """Turn a CompileRequest into a Node enriched with server facts.

    Attributes:
        finder: Node-information service.
        server_facts: Server facts merged into every looked-up node.

    Example:
        >>> resolver = NodeResolver(PlainNodeFinder(MemoryFactStore()), ServerFactCache("0.1.0"))
        >>> node = resolver.resolve(CompileRequest(key="web01"))
        >>> node.name
        'web01'
    """

    def __init__(self, finder: NodeFinder, server_facts: ServerFactCache) -> None:
        self.finder = finder
        self.server_facts = server_facts

    def resolve(self, request: CompileRequest) -> Node:
        """Return the node ``request`` should be compiled for.

        Args:
            request: Compile request.

        Returns:
            The pre-resolved ``use_node`` for local requests, else the looked-up node.

        Raises:
            PermissionDeniedError: A remote request supplied ``use_node``.
            CompilationError: The node lookup failed.
            ArgumentError: No node was found.
        """
        use_node = request.options.use_node
        if use_node is not None:
            if request.remote:
                raise PermissionDeniedError("use_node")
            logger.debug("using_supplied_node", node=use_node.name)
            return use_node

        name = request.target
        if not name:
            raise ArgumentError("Could not find node; no node name given; cannot compile")

        node = self.find_node(name, request.environment, request.options.transaction_uuid)
        if node is None:
            raise ArgumentError(f"Could not find node '{name}'; cannot compile")
        return node

    def find_node(
        self,
        name: str,
        environment: str | None,
        transaction_uuid: str | None,
    ) -> Node | None:
        """Look up ``name`` and merge server facts into the result."""
        with span("find_node", {"node.name": name, "node.environment": environment}):
            try:
                node = self.finder.find(
                    name,
                    environment=environment,
                    transaction_uuid=transaction_uuid,
                )
            except Exception as exc:
                message = f"Failed when searching for node {name}: {exc}"
                logger.exception("node_lookup_failed", node=name, environment=environment)
                raise CompilationError(
                    message,
                    node_name=name,
                    environment=environment,
                ) from exc

            if node is not None:
                node.merge(self.server_facts.facts)
                logger.debug("node_resolved", node=node.name, environment=node.environment)
            return node
