"""Ingest facts submitted inline with a compile request.

Facts handed in with the request are decoded, checked against the node
the catalog is requested for, and saved to the fact store so the node
lookup that follows sees them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import unquote_plus

import structlog

from preview_core.errors import ConfigurationError, ConsistencyError
from preview_core.observability import span
from preview_core.schemas.node import FactSet

if TYPE_CHECKING:
    from preview_core.facts.decoder import FactDecoder
    from preview_core.facts.store import FactStore
    from preview_core.schemas.request import CompileRequest

logger = structlog.get_logger(__name__)


class FactIngestor:
    """Decode and persist request-supplied facts.

    Attributes:
        decoder: Decodes encoded fact payloads.
        store: Receives the decoded facts.

    Example:
        >>> ingestor = FactIngestor(FormatFactDecoder(), MemoryFactStore())
        >>> ingestor.extract_facts_from_request(request)
    """

    def __init__(self, decoder: FactDecoder, store: FactStore) -> None:
        self.decoder = decoder
        self.store = store

    def extract_facts_from_request(self, request: CompileRequest) -> None:
        """Save the request's inline facts, if any.

        Args:
            request: Compile request, possibly carrying ``facts``.

        Raises:
            ConfigurationError: Facts were given without a fact format.
            ConsistencyError: The facts belong to a node other than ``request.key``.
        """
        options = request.options
        if options.facts is None:
            return

        if not options.facts_format:
            raise ConfigurationError(f"Facts but no fact format provided for {request.key}")

        with span("find_facts", {"node.name": request.key}):
            if isinstance(options.facts, FactSet):
                facts = options.facts
            else:
                # Payloads arrive percent-encoded
                facts = self.decoder.decode(options.facts_format, unquote_plus(options.facts))

            if facts.name != request.key:
                raise ConsistencyError(str(request.key), facts.name)

            self.store.save(
                facts,
                environment=request.environment,
                transaction_uuid=options.transaction_uuid,
            )
            logger.info("facts_ingested", node=facts.name, count=len(facts.values))
