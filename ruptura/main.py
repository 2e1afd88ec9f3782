"""ruptura — earthquake damage assessment and emergency dispatch ledger.

This is the application entry point.  It wires the AssessmentEngine,
AssessmentLedger, AdapterRegistry, dashboard broadcasting, and the
HTTP / WebSocket endpoints together.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from ruptura.adapters.ledger_call import LedgerCallAdapter
from ruptura.adapters.omron import OmronD7SAdapter
from ruptura.adapters.registry import AdapterRegistry
from ruptura.api.sensors import create_sensor_router
from ruptura.api.ws_dashboard import DashboardManager, create_dashboard_router
from ruptura.api.ws_reading import create_reading_router
from ruptura.config import Settings, settings
from ruptura.core.engine import AssessmentEngine
from ruptura.store.ledger import AssessmentLedger

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)


def create_app(config: Settings | None = None) -> FastAPI:
    """Build a fully wired application around a fresh ledger."""
    config = config or settings

    # ── State ────────────────────────────────────────────────────────────
    ledger = AssessmentLedger(
        engine=AssessmentEngine(),
        default_category=config.default_building_category,
    )

    # ── Adapter Registry ─────────────────────────────────────────────────
    registry = AdapterRegistry([OmronD7SAdapter(), LedgerCallAdapter()])

    # ── Dashboard ────────────────────────────────────────────────────────
    dashboard = DashboardManager()
    ledger.subscribe(dashboard)

    # ── App ──────────────────────────────────────────────────────────────
    app = FastAPI(
        title=config.app_name,
        description="Damage classification, urgency scoring and response dispatch",
        version="1.0.0",
        debug=config.debug,
    )
    app.state.ledger = ledger
    app.state.adapter_registry = registry
    app.state.dashboard = dashboard

    # ── Routes ───────────────────────────────────────────────────────────
    app.include_router(create_sensor_router(ledger, event_poll_limit=config.event_poll_limit))
    app.include_router(create_reading_router(ledger, registry))
    app.include_router(create_dashboard_router(
        ledger,
        dashboard,
        replay_count=config.dashboard_replay_count,
    ))

    # ── Health ───────────────────────────────────────────────────────────

    @app.get("/health")
    async def health() -> dict:
        stats = await ledger.get_stats()
        return {
            "status": "ok",
            "rule_table_version": AssessmentEngine.rule_table_version,
            **stats.model_dump(),
            "ledger_entries": ledger.entry_count,
            "dashboard_clients": dashboard.client_count,
            "feeds": registry.stats,
            "feed_totals": registry.totals,
        }

    return app


app = create_app()
