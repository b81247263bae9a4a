"""Live check: connect to /ws/dashboard, push snapshots, watch results arrive.

Usage:
    RADAR_HOST=localhost:8000 python live_check.py
"""

import asyncio
import json
import os
import uuid
from datetime import datetime, timezone

import websockets

HOST = os.environ.get("RADAR_HOST", "localhost:8000")
FEED_URI = f"ws://{HOST}/ws/incidents"
DASHBOARD_URI = f"ws://{HOST}/ws/dashboard"

# A tight group near Carig Sur plus one far-away report
_ORIGIN = (17.6560, 121.7500)


def _incident(dlat: float, dlon: float, category: str, status: str = "verified") -> dict:
    return {
        "id": str(uuid.uuid4()),
        "latitude": _ORIGIN[0] + dlat,
        "longitude": _ORIGIN[1] + dlon,
        "category": category,
        "status": status,
        "event_time": datetime.now(timezone.utc).isoformat(),
        "zone": "Carig Sur",
    }


async def dashboard_listener(ready_event: asyncio.Event, expected: int):
    """Connect to /ws/dashboard and print whatever the engine publishes."""
    async with websockets.connect(DASHBOARD_URI) as ws:
        print("[DASHBOARD] Connected — waiting for cluster results...\n")
        ready_event.set()

        for _ in range(expected):
            data = json.loads(await ws.recv())
            print("=" * 70)
            print(f"[DASHBOARD] RESULT seq={data.get('sequence')}")
            print("=" * 70)
            for c in data.get("clusters", []):
                center = c["center"]
                print(
                    f"  ({center['latitude']:.5f}, {center['longitude']:.5f}) "
                    f"size={c['size']} score={c['final_score']:.3f} [{c['risk_label']}] "
                    f"spread={c['average_spread_meters']:.0f} m"
                )
            print(f"  Unclustered: {data.get('unclustered_count')}")
            for n in data.get("capacity_notices", []):
                print(f"  ! {n['message']}")
            print()


async def send_snapshots():
    """Send two snapshots to /ws/incidents, the second one larger."""
    first = [
        _incident(0.0000, 0.0000, "Flood"),
        _incident(0.0004, 0.0003, "Assault"),
        _incident(0.0500, 0.0500, "Theft"),
    ]
    second = first + [_incident(0.0002 * i, 0.0001 * i, "Car Accident") for i in range(1, 8)]

    async with websockets.connect(FEED_URI) as ws:
        for snapshot in (first, second):
            await ws.send(json.dumps({"incidents": snapshot}))
            ack = json.loads(await ws.recv())
            print(f"[FEED] {ack}")
            await asyncio.sleep(0.5)


async def main():
    ready = asyncio.Event()
    listener = asyncio.create_task(dashboard_listener(ready, expected=2))
    await ready.wait()
    await send_snapshots()
    await asyncio.wait_for(listener, timeout=10)


if __name__ == "__main__":
    asyncio.run(main())
