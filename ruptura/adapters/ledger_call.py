"""LedgerCallAdapter — translates contract-call shaped payloads.

Expected raw format (the argument list of processSensorData):
{
    "sensorId": "OMR-IST-FAT-001",
    "displacement": 15,
    "jmaIntensity": 3,
    "collapseFlag": false,
    "buildingType": "Residential"
}
"""

from __future__ import annotations

from typing import Any

from ruptura.adapters.base import INTENSITY_KEY, SENSOR_KEY, ReadingAdapter


class LedgerCallAdapter(ReadingAdapter):
    source_name = "ledger_call"

    def can_handle(self, raw: dict[str, Any]) -> bool:
        return SENSOR_KEY in raw and INTENSITY_KEY in raw and "location" not in raw

    def building_label(self, raw: dict[str, Any]) -> Any:
        return raw.get("buildingType")
