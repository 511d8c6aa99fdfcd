"""Persisted fingerprint tracking.

The store maps diagram kind -> last-approved fingerprint, plus the digest of
the fact set those fingerprints were computed from. The gate controller is
its only reader and writer; it receives a store object explicitly so tests
can use the in-memory variant.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Protocol

from ..exceptions import ErrorCode, PersistenceError
from ..logging_config import get_logger

logger = get_logger(__name__)

STORE_VERSION = 1


@dataclass(frozen=True)
class TrackedState:
    fingerprints: Mapping[str, str] = field(default_factory=dict)
    fact_digest: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.fingerprints


class FingerprintStore(Protocol):
    def load(self) -> TrackedState:
        """Last committed state; an empty state when nothing was tracked yet."""
        ...

    def commit(self, state: TrackedState) -> None:
        """Replace the tracked state."""
        ...


class InMemoryFingerprintStore:
    """Store kept in memory. ``commits`` counts writes."""

    def __init__(self, state: Optional[TrackedState] = None) -> None:
        self.state = state or TrackedState()
        self.commits = 0

    def load(self) -> TrackedState:
        return self.state

    def commit(self, state: TrackedState) -> None:
        self.state = TrackedState(dict(state.fingerprints), state.fact_digest)
        self.commits += 1


class JsonFingerprintStore:
    """Store backed by a small JSON file, replaced atomically on commit."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> TrackedState:
        if not self.path.exists():
            logger.info(f"No fingerprint store at {self.path}")
            return TrackedState()
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            fingerprints = raw.get("fingerprints", {})
            if not isinstance(fingerprints, dict) or not all(
                isinstance(v, str) for v in fingerprints.values()
            ):
                raise ValueError("'fingerprints' must map kinds to strings")
            return TrackedState(dict(fingerprints), raw.get("fact_digest"))
        except (OSError, ValueError, AttributeError) as e:
            raise PersistenceError(self.path, str(e), code=ErrorCode.AG400) from e

    def commit(self, state: TrackedState) -> None:
        data = {
            "version": STORE_VERSION,
            "fingerprints": dict(sorted(state.fingerprints.items())),
            "fact_digest": state.fact_digest,
        }
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(self.path, str(e), code=ErrorCode.AG401) from e
        logger.info(f"Saved {len(state.fingerprints)} fingerprints to {self.path}")
