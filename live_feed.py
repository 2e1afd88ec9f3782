"""Live feed: register the demo network, stream scenarios, watch /ws/dashboard."""

import asyncio
import json
import os

import httpx
import websockets

from ruptura.adapters.source import DEMO_SCENARIOS, DEMO_SENSOR_IDS


HOST = os.environ.get("RUPTURA_HOST", "127.0.0.1:8000")
READING_URI = f"ws://{HOST}/ws/reading"
DASHBOARD_URI = f"ws://{HOST}/ws/dashboard"


async def dashboard_listener(ready_event: asyncio.Event):
    """Connect to /ws/dashboard and print whatever the ledger pushes."""
    async with websockets.connect(DASHBOARD_URI) as ws:
        print("[DASHBOARD] Connected — waiting for ledger events...\n")
        ready_event.set()

        while True:
            event = json.loads(await ws.recv())
            kind = event.get("event_type")
            line = f"[DASHBOARD] #{event.get('sequence')} {kind} sensor={event.get('sensor_id')}"
            if kind == "DamageAssessed":
                line += (
                    f" severity={event['severity_level']}/5"
                    f" urgency={event['urgency_score']}/100"
                    f" teams={', '.join(event['response_teams'])}"
                )
            elif kind == "EmergencyTriggered":
                line += f" !! {event['message']}"
            elif kind == "CrisisSystemNotified":
                line += f" urgency={event['urgency_score']}"
            print(line)


async def register_sensors():
    """Register the demo sensors over REST, ignoring ones already known."""
    async with httpx.AsyncClient(base_url=f"http://{HOST}") as client:
        for sensor_id in DEMO_SENSOR_IDS:
            resp = await client.post("/api/sensors", json={"sensor_id": sensor_id})
            status = "registered" if resp.status_code == 201 else resp.json()["detail"]["kind"]
            print(f"[SENSOR] {sensor_id}: {status}")


async def send_readings():
    """Send the five demo scenarios to /ws/reading."""
    async with websockets.connect(READING_URI) as ws:
        for label, submission in DEMO_SCENARIOS:
            await ws.send(submission.model_dump_json())
            resp = json.loads(await ws.recv())
            if resp["status"] == "accepted":
                a = resp["assessment"]
                print(f"[READING] {label} -> severity={a['severity_level']} urgency={a['urgency_score']}")
            else:
                print(f"[READING] {label} -> {resp['kind']}: {resp['detail']}")
            await asyncio.sleep(0.5)  # Small delay between readings


async def main():
    print("Connecting to dashboard WebSocket...")
    ready = asyncio.Event()

    listener_task = asyncio.create_task(dashboard_listener(ready))
    await ready.wait()

    print("\nRegistering sensors...\n")
    await register_sensors()

    print("\nSending demo readings...\n")
    await send_readings()

    await asyncio.sleep(2)
    listener_task.cancel()
    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
