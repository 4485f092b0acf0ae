"""Fact payload decoding.

FactDecoder is the collaborator used by the fact ingestor to turn an
encoded fact payload into a FactSet. FormatFactDecoder handles the
JSON and YAML encodings a command line caller is likely to hand in.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, ClassVar, Protocol, runtime_checkable

import yaml
from pydantic import ValidationError as PydanticValidationError

from preview_core.errors import ConfigurationError
from preview_core.schemas.node import FactSet


@runtime_checkable
class FactDecoder(Protocol):
    """Decodes an encoded fact payload."""

    def decode(self, fmt: str, payload: str) -> FactSet:
        """Decode ``payload`` (already percent-decoded) encoded as ``fmt``."""
        ...


class FormatFactDecoder:
    """FactDecoder for json, pson and yaml payloads.

    The payload must be a mapping with ``name`` and ``values`` keys, and
    optionally ``timestamp``.

    Example:
        >>> decoder = FormatFactDecoder()
        >>> facts = decoder.decode("json", '{"name": "web01", "values": {"os": "linux"}}')
        >>> facts.name
        'web01'
    """

    _loaders: ClassVar[dict[str, Callable[[str], Any]]] = {
        "json": json.loads,
        "pson": json.loads,
        "yaml": yaml.safe_load,
    }

    @property
    def formats(self) -> list[str]:
        return sorted(self._loaders)

    def decode(self, fmt: str, payload: str) -> FactSet:
        loader = self._loaders.get(fmt.lower())
        if loader is None:
            raise ConfigurationError(
                f"Unsupported fact format '{fmt}'. Supported: {', '.join(self.formats)}"
            )

        try:
            data = loader(payload)
        except (ValueError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Could not decode {fmt} facts",
                internal_details=str(exc),
            ) from exc

        try:
            return FactSet.model_validate(data)
        except PydanticValidationError as exc:
            raise ConfigurationError(
                f"Decoded {fmt} payload is not a fact set",
                internal_details=str(exc),
            ) from exc
