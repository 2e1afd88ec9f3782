"""AdapterRegistry — routes vendor payloads into the ledger.

A payload is offered to each adapter in registration order; the first
whose can_handle() accepts it translates the payload, and the resulting
submission goes to the AssessmentLedger.  Outcomes are tallied per feed:
accepted readings, malformed payloads, and ledger refusals broken down by
error kind, so the health endpoint shows which feed is sending readings
for unregistered sensors or out-of-range intensities.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable

from ruptura.adapters.base import ReadingAdapter
from ruptura.domain.assessment import DamageAssessment
from ruptura.domain.errors import RupturaError
from ruptura.domain.reading import ReadingSubmission
from ruptura.store.ledger import AssessmentLedger

logger = logging.getLogger(__name__)


@dataclass
class FeedStats:
    source_name: str
    accepted: int = 0
    malformed: int = 0
    refused: Counter = field(default_factory=Counter)

    def to_dict(self) -> dict:
        return {
            "source_name": self.source_name,
            "accepted": self.accepted,
            "malformed": self.malformed,
            "refused": dict(self.refused),
        }


class NoAdapterFoundError(Exception):
    """No registered adapter recognises the payload shape."""

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = sorted(keys)
        super().__init__(f"No adapter recognises payload keys {self.keys}")


class AdaptationError(Exception):
    """The matching adapter could not build a submission from the payload."""

    def __init__(self, source_name: str, reason: str) -> None:
        self.source_name = source_name
        self.reason = reason
        super().__init__(f"{source_name} payload rejected: {reason}")


class AdapterRegistry:
    """Ordered set of feed adapters with per-feed outcome counts."""

    def __init__(self, adapters: Iterable[ReadingAdapter] = ()) -> None:
        self._adapters: list[ReadingAdapter] = []
        self._stats: dict[str, FeedStats] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: ReadingAdapter) -> None:
        if adapter.source_name in self._stats:
            raise ValueError(f"Feed '{adapter.source_name}' already registered")
        self._adapters.append(adapter)
        self._stats[adapter.source_name] = FeedStats(adapter.source_name)
        logger.info("Registered feed adapter: %s", adapter.source_name)

    def select(self, raw: dict[str, Any]) -> ReadingAdapter:
        for adapter in self._adapters:
            if adapter.can_handle(raw):
                return adapter
        raise NoAdapterFoundError(raw.keys())

    def adapt(self, raw: dict[str, Any]) -> ReadingSubmission:
        """Translate *raw* without submitting it.

        Raises:
            NoAdapterFoundError: no adapter recognises the shape.
            AdaptationError: the matching adapter rejected the payload.
        """
        return self._translate(self.select(raw), raw)

    async def submit(
        self,
        raw: dict[str, Any],
        ledger: AssessmentLedger,
    ) -> tuple[ReadingSubmission, DamageAssessment]:
        """Translate *raw* and submit it to *ledger*.

        Ledger errors propagate unchanged after being counted against the
        feed that produced the reading.
        """
        adapter = self.select(raw)
        submission = self._translate(adapter, raw)
        stats = self._stats[adapter.source_name]
        try:
            assessment = await ledger.submit(submission)
        except RupturaError as exc:
            stats.refused[exc.kind] += 1
            raise
        stats.accepted += 1
        return submission, assessment

    def _translate(self, adapter: ReadingAdapter, raw: dict[str, Any]) -> ReadingSubmission:
        try:
            return adapter.adapt(raw)
        except ValueError as exc:
            self._stats[adapter.source_name].malformed += 1
            logger.warning("Malformed %s payload: %s", adapter.source_name, exc)
            raise AdaptationError(adapter.source_name, str(exc)) from exc

    @property
    def source_names(self) -> list[str]:
        return [a.source_name for a in self._adapters]

    @property
    def stats(self) -> list[dict]:
        return [s.to_dict() for s in self._stats.values()]

    @property
    def totals(self) -> dict[str, int]:
        return {
            "accepted": sum(s.accepted for s in self._stats.values()),
            "malformed": sum(s.malformed for s in self._stats.values()),
            "refused": sum(sum(s.refused.values()) for s in self._stats.values()),
        }
