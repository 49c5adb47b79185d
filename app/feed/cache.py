"""Local snapshot of the raw feed used to start without a network round-trip."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class CacheStore:
    """Best-effort reader and writer for the cached feed document."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> bytes | None:
        """Return the cached bytes, or ``None`` when missing or unreadable."""

        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            logger.info("No cached feed at %s", self._path)
            return None
        except OSError as exc:
            logger.warning("Unable to read cached feed at %s: %s", self._path, exc)
            return None

        if not data:
            logger.warning("Cached feed at %s is empty", self._path)
            return None
        return data

    def write(self, data: bytes) -> bool:
        """Replace the cached document; failures are logged, never raised."""

        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            logger.warning("Unable to write cached feed to %s: %s", self._path, exc)
            return False
        finally:
            if tmp_name is not None:
                _discard(tmp_name)

        logger.info("Cached %d bytes of feed data at %s", len(data), self._path)
        return True


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except OSError:
        logger.debug("Temporary cache file %s already removed", path)
