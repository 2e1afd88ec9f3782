"""Abstract base for vendor feed adapters.

Every upstream feed carries the same four measurement fields under the
contract-call names (``sensorId``, ``displacement``, ``jmaIntensity``,
``collapseFlag``).  Feeds differ only in how they are recognised and
where they keep the building-type label, so subclasses implement just
those two hooks and the base class builds the ReadingSubmission.

Adapters never mutate the payload, never range-check measurements (the
classifier owns that) and never call the ledger.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from ruptura.domain.reading import ReadingSubmission

SENSOR_KEY = "sensorId"
DISPLACEMENT_KEY = "displacement"
INTENSITY_KEY = "jmaIntensity"
COLLAPSE_KEY = "collapseFlag"


class ReadingAdapter(ABC):
    """Translates one vendor payload shape into a ReadingSubmission."""

    source_name: ClassVar[str]

    @abstractmethod
    def can_handle(self, raw: dict[str, Any]) -> bool:
        """Cheap shape check on *raw*; key presence only."""

    @abstractmethod
    def building_label(self, raw: dict[str, Any]) -> Any:
        """Return the feed's building-type label, or None if absent."""

    def adapt(self, raw: dict[str, Any]) -> ReadingSubmission:
        """Build a submission from *raw*.

        Raises:
            ValueError: a measurement field is missing or mistyped
                (pydantic's ValidationError is a ValueError).
        """
        return ReadingSubmission.model_validate({
            "sensor_id": require(raw, SENSOR_KEY, self.source_name),
            "displacement_mm": require(raw, DISPLACEMENT_KEY, self.source_name),
            "seismic_intensity": require(raw, INTENSITY_KEY, self.source_name),
            "collapse_flag": bool(raw.get(COLLAPSE_KEY, False)),
            "building_category": self.building_label(raw),
        })


def require(raw: dict[str, Any], key: str, source: str) -> Any:
    """Fetch a mandatory key or raise ValueError naming the source."""
    value = raw.get(key)
    if value is None:
        raise ValueError(f"{source} payload missing '{key}'")
    return value
