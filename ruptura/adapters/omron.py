"""OmronD7SAdapter — translates Omron D7S field-unit payloads.

Expected raw format:
{
    "sensorId": "OMR-4K2J9XQ1",
    "buildingId": "IST-FAT-0042",
    "location": {
        "lat": 41.01, "lng": 28.94,
        "address": "Fatih Mahallesi 12. Sokak No: 7",
        "district": "Fatih",
        "buildingType": "Hastane"
    },
    "displacement": 64.31,
    "jmaIntensity": 5,
    "collapseFlag": false,
    "batteryLevel": 88,
    "signalStrength": 91
}

Only the damage-relevant fields are kept.  Battery and signal telemetry
belong to the device-health surface, not to damage assessment.
"""

from __future__ import annotations

from typing import Any

from ruptura.adapters.base import SENSOR_KEY, ReadingAdapter


class OmronD7SAdapter(ReadingAdapter):
    """Field units nest the building type under ``location``."""

    source_name = "omron_d7s"

    def can_handle(self, raw: dict[str, Any]) -> bool:
        return SENSOR_KEY in raw and isinstance(raw.get("location"), dict)

    def building_label(self, raw: dict[str, Any]) -> Any:
        return raw["location"].get("buildingType")
