"""Reading sources — where submissions come from.

The rule engine never depends on a random-number generator or a device.
Anything that can produce ReadingSubmissions implements ReadingSource;
the offline demo and the tests use FixtureReadingSource.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Protocol

from ruptura.domain.enums import BuildingCategory
from ruptura.domain.reading import ReadingSubmission


class ReadingSource(Protocol):
    """Produces one submission per call, or None when exhausted."""

    def next_reading(self) -> ReadingSubmission | None:
        ...


class FixtureReadingSource:
    """Replays a fixed list of submissions in order."""

    def __init__(self, readings: Iterable[ReadingSubmission]) -> None:
        self._readings = list(readings)
        self._cursor = 0

    def next_reading(self) -> ReadingSubmission | None:
        if self._cursor >= len(self._readings):
            return None
        reading = self._readings[self._cursor]
        self._cursor += 1
        return reading

    def __iter__(self) -> Iterator[ReadingSubmission]:
        while True:
            reading = self.next_reading()
            if reading is None:
                return
            yield reading

    def __len__(self) -> int:
        return len(self._readings)


# ── Istanbul demo network ────────────────────────────────────────────────────

DEMO_SENSOR_IDS: tuple[str, ...] = (
    "OMR-IST-FAT-001",  # Fatih
    "OMR-IST-BEY-002",  # Beyoğlu
    "OMR-IST-KAD-003",  # Kadıköy
    "OMR-IST-BES-004",  # Beşiktaş
    "OMR-IST-SIS-005",  # Şişli
)

# (label, submission) pairs, mildest first
DEMO_SCENARIOS: tuple[tuple[str, ReadingSubmission], ...] = (
    ("Minor earthquake", ReadingSubmission(
        sensor_id="OMR-IST-FAT-001", displacement_mm=15, seismic_intensity=3,
        collapse_flag=False, building_category=BuildingCategory.RESIDENTIAL,
    )),
    ("Moderate earthquake", ReadingSubmission(
        sensor_id="OMR-IST-BEY-002", displacement_mm=45, seismic_intensity=4,
        collapse_flag=False, building_category=BuildingCategory.OFFICE,
    )),
    ("Strong earthquake", ReadingSubmission(
        sensor_id="OMR-IST-KAD-003", displacement_mm=65, seismic_intensity=5,
        collapse_flag=False, building_category=BuildingCategory.SCHOOL,
    )),
    ("Severe earthquake", ReadingSubmission(
        sensor_id="OMR-IST-BES-004", displacement_mm=90, seismic_intensity=6,
        collapse_flag=False, building_category=BuildingCategory.HOSPITAL,
    )),
    ("Building collapse", ReadingSubmission(
        sensor_id="OMR-IST-SIS-005", displacement_mm=120, seismic_intensity=7,
        collapse_flag=True, building_category=BuildingCategory.SHOPPING_MALL,
    )),
)


def demo_source() -> FixtureReadingSource:
    return FixtureReadingSource(sub for _, sub in DEMO_SCENARIOS)
