"""Server-side facts merged into every node before compilation.

The server facts (serverversion, servername, serverip) describe the process
doing the compiling. They are computed once when the compiler is
constructed and never change while it runs, so they are cached.
"""

from __future__ import annotations

import socket
from collections.abc import Mapping
from types import MappingProxyType
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)

# Server fact name -> system fact it is read from
SERVER_FACT_SOURCES: Mapping[str, str] = MappingProxyType(
    {
        "servername": "fqdn",
        "serverip": "ipaddress",
    }
)


@runtime_checkable
class FactSource(Protocol):
    """Source of facts about the host running the compiler."""

    def value(self, name: str) -> str | None:
        """Return the fact value, or None if it is unknown."""
        ...


class SystemFactSource:
    """FactSource reading host identity from the local resolver.

    Supports the facts ``fqdn``, ``hostname``, ``domain`` and ``ipaddress``.
    Lookups raise OSError, or UnicodeError for an unencodable host name,
    when the resolver fails.
    """

    def value(self, name: str) -> str | None:
        if name == "fqdn":
            fqdn = socket.getfqdn()
            return fqdn if "." in fqdn else None
        if name == "hostname":
            return socket.gethostname().split(".", 1)[0] or None
        if name == "domain":
            _, _, domain = socket.getfqdn().partition(".")
            return domain or None
        if name == "ipaddress":
            return socket.gethostbyname(socket.gethostname())
        return None


class ServerFactCache:
    """Server identity facts, computed once.

    Attributes:
        facts: Read-only mapping of server facts. Keys whose lookup failed
            are absent.

    Example:
        >>> cache = ServerFactCache(version="0.1.0")
        >>> cache.facts["serverversion"]
        '0.1.0'
    """

    def __init__(self, version: str, source: FactSource | None = None) -> None:
        """Compute the server facts.

        Args:
            version: Version reported as ``serverversion``.
            source: Host fact source. Defaults to SystemFactSource.
        """
        self._source = source or SystemFactSource()
        self._facts = MappingProxyType(self._collect(version))

    @property
    def facts(self) -> Mapping[str, str]:
        return self._facts

    def _lookup(self, name: str) -> str | None:
        try:
            value = self._source.value(name)
        except Exception as exc:
            logger.warning("server_fact_lookup_failed", fact=name, error=str(exc))
            return None
        if value is None:
            logger.warning("server_fact_unavailable", fact=name)
        return value

    def _collect(self, version: str) -> dict[str, str]:
        facts: dict[str, str] = {"serverversion": version}

        for server_fact, source_fact in SERVER_FACT_SOURCES.items():
            if (value := self._lookup(source_fact)) is not None:
                facts[server_fact] = value

        if "servername" not in facts:
            host = self._lookup("hostname")
            domain = self._lookup("domain")
            if host and domain:
                facts["servername"] = f"{host}.{domain}"
            elif host:
                facts["servername"] = host

        return facts
