# context/providers/defense_rankings.py
"""
Defense-ranking source provider and persisted rankings file.

The source is configured with DEFENSE_RANKINGS_SOURCE and may be an
http(s) URL, a file:// URL or a local path. Its payload (JSON or CSV, in
any supported layout) goes through the schema normalizer.

The rankings file is the bootstrap default at startup and the offline
fallback; it is rewritten after every successful refresh.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional, Sequence
from urllib.parse import unquote, urlparse

from context.defense import DefenseRankEntry, normalize_defense_ranks
from context.errors import (
    MalformedPayloadError,
    SourceNotConfiguredError,
    UpstreamUnavailableError,
)
from context.providers.base import ContextProvider, fetch_response

_logger = logging.getLogger(__name__)

BUNDLED_RANKINGS_PATH = Path(__file__).resolve().parent.parent / "data" / "defense_rankings.json"


def _is_http(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def _local_path(source: str) -> Path:
    if source.lower().startswith("file://"):
        return Path(unquote(urlparse(source).path))
    return Path(source).expanduser()


class DefenseRankingsProvider(ContextProvider):
    """Fetches and normalizes defense rankings from the configured source."""

    def __init__(
        self,
        source: Optional[str] = None,
        weights: Optional[Mapping[str, float]] = None,
        timeout: float = 10.0,
    ):
        super().__init__(use_live_data=bool(source), timeout=timeout)
        self._source = source.strip() if source else None
        self._weights = weights

    @property
    def source_name(self) -> str:
        return self._source or "bundled-defaults"

    @property
    def is_configured(self) -> bool:
        return bool(self._source)

    async def fetch_text(self) -> str:
        """Read the raw payload from the configured source."""
        if not self._source:
            raise SourceNotConfiguredError("DEFENSE_RANKINGS_SOURCE is not set")

        if _is_http(self._source):
            response = await fetch_response(self._source, timeout=self._timeout)
            return response.text

        path = _local_path(self._source)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise UpstreamUnavailableError(f"Cannot read {path}: {e}") from e
        except ValueError as e:
            raise MalformedPayloadError(f"{path} is not valid UTF-8 text: {e}") from e

    async def fetch(self) -> list[DefenseRankEntry]:
        """
        Fetch and normalize rankings.

        Raises:
            SourceNotConfiguredError: no source configured
            UpstreamUnavailableError: source unreachable
            MalformedPayloadError: payload undecodable or yielded zero usable records
        """
        entries = normalize_defense_ranks(await self.fetch_text(), self._weights)
        if not entries:
            raise MalformedPayloadError(f"{self.source_name} did not include any rankings")
        _logger.info(f"Fetched {len(entries)} defense rankings from {self.source_name}")
        return entries


# =============================================================================
# Persisted Rankings File
# =============================================================================


def load_rankings_file(
    path: Path,
    weights: Optional[Mapping[str, float]] = None,
) -> list[DefenseRankEntry]:
    """
    Load a rankings file, falling back to the bundled file.

    Returns an empty list only when neither file is readable.
    """
    for candidate in (path, BUNDLED_RANKINGS_PATH):
        try:
            entries = normalize_defense_ranks(candidate.read_text(encoding="utf-8"), weights)
        except (OSError, ValueError) as e:
            _logger.warning(f"Cannot read defense rankings file {candidate}: {e}")
            continue
        if entries:
            return entries
        _logger.warning(f"Defense rankings file {candidate} has no usable rows")
    return []


def write_rankings_file(path: Path, entries: Sequence[DefenseRankEntry]) -> None:
    """Atomically replace the rankings file with entries as a JSON array."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps([entry.to_dict() for entry in entries], indent=2)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
