"""Fact handling for catalog-preview.

This package provides:
- ServerFactCache: Server identity facts computed once per process
- FactIngestor: Decode and persist request-supplied facts
- FactDecoder / FormatFactDecoder: Fact payload decoding
- FactStore / MemoryFactStore: Fact persistence
- NodeFinder / PlainNodeFinder: Node lookup backed by stored facts
"""

from __future__ import annotations

from preview_core.facts.decoder import FactDecoder, FormatFactDecoder
from preview_core.facts.ingestor import FactIngestor
from preview_core.facts.server_facts import FactSource, ServerFactCache, SystemFactSource
from preview_core.facts.store import FactStore, MemoryFactStore, NodeFinder, PlainNodeFinder

__all__: list[str] = [
    "ServerFactCache",
    "FactSource",
    "SystemFactSource",
    "FactIngestor",
    "FactDecoder",
    "FormatFactDecoder",
    "FactStore",
    "MemoryFactStore",
    "NodeFinder",
    "PlainNodeFinder",
]
