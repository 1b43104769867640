"""Disk-backed snapshot of the last successfully fetched tax rate table"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from payroll_gateway.config import settings
from payroll_gateway.domain.exceptions import CacheUnavailable
from payroll_gateway.domain.models import CacheSnapshot, RateTable
from payroll_gateway.infrastructure.observability.metrics import cache_write_failure_counter
from payroll_gateway.utils.time_utils import hours_to_ms, now_ms

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = hours_to_ms(24)


def is_fresh(snapshot: CacheSnapshot, ttl_ms: int = DEFAULT_TTL_MS, now: Optional[int] = None) -> bool:
    """True while the snapshot is younger than ttl_ms (stale at exactly ttl_ms)"""
    current = now_ms() if now is None else now
    return current - snapshot.captured_at_ms < ttl_ms


class RateCache:
    """
    Single JSON document: {"timestamp": <epoch ms>, "rates": {...}}.

    Read and written whole. Concurrent writers are not coordinated; the last
    write wins. Failures never propagate: an unreadable file is a cache miss
    and a failed write is logged and dropped.
    """

    def __init__(self, path: str | os.PathLike | None = None, ttl_ms: int | None = None):
        self.path = Path(path or settings.cache_file_path)
        self.ttl_ms = ttl_ms if ttl_ms is not None else hours_to_ms(settings.rate_cache_ttl_hours)

    def _load(self) -> Optional[CacheSnapshot]:
        """
        Raises:
            CacheUnavailable: file exists but cannot be read or decoded
        """
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            timestamp = data["timestamp"]
            rates = data["rates"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise CacheUnavailable(f"Unreadable rate cache {self.path}: {e}") from e

        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)) or not isinstance(rates, dict):
            raise CacheUnavailable(f"Unexpected rate cache layout in {self.path}")
        return CacheSnapshot(captured_at_ms=int(timestamp), rates=rates)

    def read(self) -> Optional[CacheSnapshot]:
        """Stored snapshot, or None when absent or undecodable"""
        try:
            return self._load()
        except CacheUnavailable as e:
            logger.warning(f"Ignoring rate cache: {e}")
            return None

    def write(self, rates: RateTable, captured_at_ms: Optional[int] = None) -> None:
        """Replace the stored snapshot; errors are logged and swallowed"""
        payload = {
            "timestamp": now_ms() if captured_at_ms is None else captured_at_ms,
            "rates": rates,
        }
        try:
            self._replace(json.dumps(payload))
        except (OSError, TypeError, ValueError) as e:
            cache_write_failure_counter.inc()
            logger.error(f"Rate cache write failed for {self.path}: {e}")

    def _replace(self, document: str) -> None:
        # Readers see either the old document or the new one
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".rates-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def is_fresh(self, snapshot: CacheSnapshot, now: Optional[int] = None) -> bool:
        return is_fresh(snapshot, self.ttl_ms, now)
