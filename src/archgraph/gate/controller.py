"""Commit gate: block structural change that arrives without a review.

Each evaluation starts from the persisted fingerprints and ends in one of
two states:

    CLEAN    fingerprints match, or they differ and the review artifact is
             part of the change set (new fingerprints are persisted)
    BLOCKED  fingerprints differ and no review artifact is staged; the
             store is left untouched and the ReviewReport is the reason
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional

from ..analysis.review import ReviewReport
from ..detection import Determinism, stable_fingerprint
from ..logging_config import get_logger
from .store import FingerprintStore, TrackedState

logger = get_logger(__name__)


class GateState(Enum):
    CLEAN = "clean"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of one gate evaluation.

    A BLOCKED decision is the rejection itself, carrying the report that
    explains it; it is returned, not raised.
    """

    state: GateState
    fingerprints: Mapping[str, str] = field(default_factory=dict)
    changed_kinds: tuple[str, ...] = ()
    persisted: bool = False
    report: Optional[ReviewReport] = None
    review_artifact: Optional[str] = None

    @property
    def blocked(self) -> bool:
        return self.state is GateState.BLOCKED


def _normalize(path: str) -> str:
    return posixpath.normpath(path.replace("\\", "/"))


def changed_kinds(current: Mapping[str, str], tracked: Mapping[str, str]) -> tuple[str, ...]:
    """Kinds whose fingerprint differs, appeared, or disappeared."""
    kinds = set(current) | set(tracked)
    return tuple(sorted(k for k in kinds if current.get(k) != tracked.get(k)))


class GateController:
    """Decides whether an operation may proceed given the current artifacts."""

    def __init__(self, store: FingerprintStore, review_artifact: str) -> None:
        self.store = store
        self.review_artifact = review_artifact

    def review_staged(self, change_set: Iterable[str]) -> bool:
        wanted = _normalize(self.review_artifact)
        return any(_normalize(p) == wanted for p in change_set)

    def evaluate(
        self,
        artifacts: Mapping[str, str],
        change_set: Iterable[str],
        report: Optional[ReviewReport] = None,
        fact_digest: Optional[str] = None,
        determinism: Optional[Mapping[str, Determinism]] = None,
    ) -> GateDecision:
        """Run one gate transition.

        Args:
            artifacts: Diagram kind -> rendered text
            change_set: Paths in the pending change (e.g. staged files),
                relative to the project root
            report: Structural review surfaced when blocked
            fact_digest: Digest of the fact set, persisted with the fingerprints
            determinism: Per-kind determinism class; kinds not listed are exact.
                Fuzzy kinds are fingerprinted by byte histogram

        Raises:
            PersistenceError: If the store cannot be read or written.
        """
        determinism = determinism or {}
        current = {
            kind: stable_fingerprint(text, determinism.get(kind, Determinism.EXACT))
            for kind, text in sorted(artifacts.items())
        }
        tracked = self.store.load()

        differing = changed_kinds(current, tracked.fingerprints)
        if not differing:
            logger.info("Diagram fingerprints match tracked values")
            return GateDecision(GateState.CLEAN, current)

        if self.review_staged(change_set):
            self.store.commit(TrackedState(current, fact_digest))
            logger.info(
                f"{self.review_artifact} is staged; "
                f"accepted new fingerprints for {', '.join(differing)}"
            )
            return GateDecision(
                GateState.CLEAN,
                current,
                changed_kinds=differing,
                persisted=True,
                report=report,
                review_artifact=self.review_artifact,
            )

        logger.warning(
            f"Structural change in {', '.join(differing)} without {self.review_artifact} staged"
        )
        return GateDecision(
            GateState.BLOCKED,
            current,
            changed_kinds=differing,
            report=report,
            review_artifact=self.review_artifact,
        )
