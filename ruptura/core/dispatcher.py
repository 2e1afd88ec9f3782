"""Response dispatch — which teams to send and whether to escalate.

Teams are listed in dispatch priority order.  The external crisis system
is notified for any severity >= 2; Monitoring-only cases stay local so
ordinary seismic noise does not flood it.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from ruptura.domain.enums import ResponseTeam

NOTIFY_THRESHOLD = 2

RESPONSE_MATRIX = MappingProxyType({
    5: (
        ResponseTeam.SEARCH_RESCUE,
        ResponseTeam.FIRE_DEPARTMENT,
        ResponseTeam.CRISIS_COORDINATION,
        ResponseTeam.MEDICAL_TEAMS,
        ResponseTeam.EMERGENCY_AIRLIFT,
    ),
    4: (
        ResponseTeam.CRISIS_COORDINATION,
        ResponseTeam.MEDICAL_TEAMS,
        ResponseTeam.SEARCH_RESCUE,
    ),
    3: (
        ResponseTeam.STRUCTURAL_INSPECTION,
        ResponseTeam.MEDICAL_TEAMS,
    ),
    2: (ResponseTeam.SECURITY_PATROL,),
    1: (ResponseTeam.MONITORING,),
})


@dataclass(frozen=True)
class DispatchDecision:
    """Teams to dispatch for one assessment and the escalation flag."""

    response_teams: tuple[ResponseTeam, ...]
    notify_external: bool


def dispatch(severity_level: int) -> DispatchDecision:
    """Look up the dispatch decision for *severity_level*."""
    teams = RESPONSE_MATRIX.get(severity_level)
    if teams is None:
        raise ValueError(f"severity level must be in [1, 5], got {severity_level}")
    # dict.fromkeys keeps first occurrence order
    return DispatchDecision(
        response_teams=tuple(dict.fromkeys(teams)),
        notify_external=severity_level >= NOTIFY_THRESHOLD,
    )
