"""Controlled enumerations for the ruptura domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum


class BuildingCategory(str, Enum):
    """Occupancy type of the monitored structure, used to weight urgency."""

    HOSPITAL = "hospital"
    SCHOOL = "school"
    SHOPPING_MALL = "shopping_mall"
    OFFICE = "office"
    RESIDENTIAL = "residential"
    INDUSTRIAL = "industrial"
    UNKNOWN = "unknown"


class ResponseTeam(str, Enum):
    """Responder categories the dispatcher may select."""

    SEARCH_RESCUE = "SearchRescue"
    FIRE_DEPARTMENT = "FireDepartment"
    CRISIS_COORDINATION = "CrisisCoordination"
    MEDICAL_TEAMS = "MedicalTeams"
    EMERGENCY_AIRLIFT = "EmergencyAirlift"
    STRUCTURAL_INSPECTION = "StructuralInspection"
    SECURITY_PATROL = "SecurityPatrol"
    MONITORING = "Monitoring"


class LedgerEventType(str, Enum):
    """Observable events emitted by the ledger, in emission order."""

    SENSOR_DATA_RECEIVED = "SensorDataReceived"
    DAMAGE_ASSESSED = "DamageAssessed"
    EMERGENCY_TRIGGERED = "EmergencyTriggered"
    CRISIS_SYSTEM_NOTIFIED = "CrisisSystemNotified"
