"""Change detection between a freshly generated artifact and the committed one.

Two strategies, chosen by the determinism class of whatever produced the
artifact:

  EXACT  byte-for-byte equality (content hash). Everything archgraph renders
         itself is exact, since the serializers are deterministic.
  FUZZY  equal byte-frequency histograms. Used for external tools whose
         output reorders attributes between runs for identical input.

The fuzzy test can miss a change that keeps the histogram intact (swapping
two characters, say). That only delays a staleness warning, so it is accepted.
"""

from __future__ import annotations

import hashlib
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from ..exceptions import ArtifactError
from ..logging_config import get_logger

logger = get_logger(__name__)

Content = Union[str, bytes]


class Determinism(Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class ArtifactCheck:
    """Outcome of comparing one artifact."""

    name: str
    determinism: Determinism
    changed: bool


def _as_bytes(content: Content) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else content


def fingerprint(content: Content) -> str:
    """Stable SHA-256 hex digest of artifact text."""
    return hashlib.sha256(_as_bytes(content)).hexdigest()


def byte_histogram(content: Content) -> Counter:
    """Multiset of byte values, positional order ignored."""
    return Counter(_as_bytes(content))


def histogram_fingerprint(content: Content) -> str:
    """SHA-256 of the byte histogram; equal for any reordering of the same bytes."""
    counts = sorted(byte_histogram(content).items())
    canonical = ",".join(f"{value}:{count}" for value, count in counts)
    return hashlib.sha256(canonical.encode("ascii")).hexdigest()


def stable_fingerprint(content: Content, determinism: Determinism) -> str:
    """Fingerprint that only moves when the chosen strategy would report a change."""
    if determinism is Determinism.FUZZY:
        return histogram_fingerprint(content)
    return fingerprint(content)


def exact_changed(old: Optional[Content], new: Content) -> bool:
    if old is None:
        return True
    return fingerprint(old) != fingerprint(new)


def fuzzy_changed(old: Optional[Content], new: Content) -> bool:
    if old is None:
        return True
    old_bytes, new_bytes = _as_bytes(old), _as_bytes(new)
    if len(old_bytes) != len(new_bytes):
        return True
    return byte_histogram(old_bytes) != byte_histogram(new_bytes)


def has_changed(old: Optional[Content], new: Content, determinism: Determinism) -> bool:
    """True when ``new`` differs from ``old`` under the given strategy.

    A missing old artifact (``None``) always counts as changed.
    """
    if determinism is Determinism.FUZZY:
        return fuzzy_changed(old, new)
    return exact_changed(old, new)


def read_artifact(path: Path) -> Optional[bytes]:
    """Committed artifact bytes, or None when it does not exist yet."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ArtifactError(path, str(e)) from e


class ChangeDetector:
    """Compares generated artifacts against the files committed on disk."""

    def __init__(self, artifact_dir: Path) -> None:
        self.artifact_dir = Path(artifact_dir)

    def check(self, name: str, content: Content, determinism: Determinism) -> ArtifactCheck:
        old = read_artifact(self.artifact_dir / name)
        changed = has_changed(old, content, determinism)
        if old is None:
            logger.debug(f"{name}: no committed artifact")
        elif changed:
            logger.debug(f"{name}: differs ({determinism.value})")
        return ArtifactCheck(name=name, determinism=determinism, changed=changed)

    def check_all(
        self, artifacts: Iterable[tuple[str, Content, Determinism]]
    ) -> list[ArtifactCheck]:
        return [self.check(name, content, det) for name, content, det in artifacts]
