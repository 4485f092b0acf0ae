"""Request entry point: facts, node, trusted data, then both compiles.

DiffCompiler wires the collaborators together. Constructing one computes
the server facts; they are reused for every request it serves.
"""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING, Any

import structlog

from preview_core.compiler.dual_compiler import DualCompiler
from preview_core.compiler.resolver import NodeResolver
from preview_core.config import PreviewConfig
from preview_core.facts.decoder import FormatFactDecoder
from preview_core.facts.ingestor import FactIngestor
from preview_core.facts.server_facts import ServerFactCache
from preview_core.facts.store import MemoryFactStore, PlainNodeFinder
from preview_core.log_destinations import LogDestinations
from preview_core.schemas.node import TrustedInformation

if TYPE_CHECKING:
    from preview_core.compiler.context import CompilerBackend
    from preview_core.facts.decoder import FactDecoder
    from preview_core.facts.server_facts import FactSource
    from preview_core.facts.store import FactStore, NodeFinder
    from preview_core.schemas.request import CompileRequest
    from preview_core.schemas.result import CompileResult

logger = structlog.get_logger(__name__)


class DiffCompiler:
    """Compile baseline and preview catalogs for compile requests.

    Attributes:
        config: Runtime configuration.
        server_facts: Server facts, computed on construction.
        ingestor: Handles facts submitted with the request.
        resolver: Resolves the request to a node.
        dual_compiler: Runs both compiles.

    Example:
        >>> compiler = DiffCompiler(backend)
        >>> result = compiler.find(
        ...     CompileRequest(
        ...         key="web01",
        ...         options=CompileOptions(preview_environment="prod_v2"),
        ...     )
        ... )
        >>> result.baseline, result.preview
    """

    def __init__(
        self,
        backend: CompilerBackend,
        *,
        config: PreviewConfig | None = None,
        fact_store: FactStore | None = None,
        node_finder: NodeFinder | None = None,
        fact_decoder: FactDecoder | None = None,
        fact_source: FactSource | None = None,
        console_stream: IO[str] | None = None,
    ) -> None:
        """Initialize the DiffCompiler.

        Args:
            backend: Configuration language compiler.
            config: Runtime configuration. Defaults to PreviewConfig().
            fact_store: Where ingested facts are saved. Defaults to MemoryFactStore.
            node_finder: Node lookup. Defaults to a PlainNodeFinder over ``fact_store``.
            fact_decoder: Fact payload decoder. Defaults to FormatFactDecoder.
            fact_source: Host fact source for the server facts.
            console_stream: Stream for the console log destination.
        """
        # Imported here: the package __init__ imports this module
        from preview_core import __version__

        self.config = config or PreviewConfig()
        self.server_facts = ServerFactCache(__version__, source=fact_source)
        logger.debug("server_facts_initialized", facts=dict(self.server_facts.facts))

        store = fact_store or MemoryFactStore()
        finder = node_finder or PlainNodeFinder(
            store,
            default_environment=self.config.default_environment,
        )
        self.ingestor = FactIngestor(fact_decoder or FormatFactDecoder(), store)
        self.resolver = NodeResolver(finder, self.server_facts)
        console_level = getattr(logging, self.config.log_level)
        self.dual_compiler = DualCompiler(
            backend,
            networked=self.networked(),
            rerun_baseline_in_preview=self.config.rerun_baseline_in_preview,
            destinations_factory=lambda: LogDestinations(
                console_stream=console_stream,
                console_level=console_level,
                console_json=self.config.json_logs,
            ),
        )

    def networked(self) -> bool:
        """Is this compiler serving remote requests, or are we just local?"""
        return self.config.networked

    def find(self, request: CompileRequest) -> CompileResult:
        """Compile baseline and preview catalogs for ``request``.

        Raises:
            ArgumentError: Malformed options, or no node to compile.
            ConsistencyError: Submitted facts name another node.
            PermissionDeniedError: A remote request used ``use_node``.
            CompilationError: Node lookup or compilation failed.
        """
        self.ingestor.extract_facts_from_request(request)

        node = self.resolver.resolve(request)
        trusted = request.trusted_information or TrustedInformation.local(node)
        node.trusted_data = trusted.to_dict()

        return self.dual_compiler.compile(node, request.options)

    @staticmethod
    def filter(catalog: Any) -> Any:
        """Remove virtual (exported) resources from ``catalog``.

        Catalogs without a ``filter`` method are returned unchanged.
        """
        if hasattr(catalog, "filter"):
            return catalog.filter(lambda resource: getattr(resource, "virtual", False))
        return catalog
