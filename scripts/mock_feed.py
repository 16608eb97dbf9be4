#!/usr/bin/env python3
"""
Local stand-in for the upstream plot feed.
Serves weather and plot readings with natural-looking daily curves.

    python scripts/mock_feed.py --port 9000 --plots 5 --drop 3
    FEED_URL=http://localhost:9000/ uvicorn app.main:app
"""
import argparse
import math
import random
from datetime import datetime, timedelta, timezone

import uvicorn
from fastapi import FastAPI

PLOTS = [
    {"nombre": "Parcela Norte", "ubicacion": "Cancún", "responsable": "Juan Pérez", "tipo_cultivo": "Maíz"},
    {"nombre": "Parcela Sur", "ubicacion": "Playa del Carmen", "responsable": "María López", "tipo_cultivo": "Frijol"},
    {"nombre": "Parcela Este", "ubicacion": "Tulum", "responsable": "Carlos Ruiz", "tipo_cultivo": "Chile"},
    {"nombre": "Parcela Oeste", "ubicacion": "Chetumal", "responsable": "Ana Gómez", "tipo_cultivo": "Tomate"},
    {"nombre": "Parcela Centro", "ubicacion": "Cancún", "responsable": "Luis Martín", "tipo_cultivo": "Calabaza"},
]


def daily_curve(base: float, amplitude: float, noise: float, inverse: bool = False) -> float:
    """Warmer (or drier, with inverse) around mid afternoon."""
    now = datetime.now(timezone.utc)
    hour_of_day = now.hour + now.minute / 60
    offset = math.sin((hour_of_day - 6) * math.pi / 12) * amplitude
    if inverse:
        offset = -offset
    return round(base + offset + random.gauss(0, noise), 1)


def build_payload(plot_count: int, dropped: set) -> dict:
    parcelas = []
    for index, plot in enumerate(PLOTS[:plot_count], start=1):
        if index in dropped:
            continue
        parcelas.append({
            "id": index,
            **plot,
            "ultimo_riego": (datetime.now(timezone.utc) - timedelta(hours=random.randint(1, 48))).isoformat(),
            "sensor": {
                "temperatura": daily_curve(27, 4, 0.5),
                "humedad": max(30, min(95, daily_curve(65, 10, 2, inverse=True))),
            },
        })
    return {
        "sensores": {
            "temperatura": daily_curve(28, 4, 0.4),
            "humedad": max(30, min(95, daily_curve(70, 12, 2, inverse=True))),
            "lluvia": round(max(0.0, random.gauss(0.5, 1.0)), 1),
            "sol": round(max(0.0, daily_curve(60, 40, 5)), 1),
        },
        "parcelas": parcelas,
    }


def main():
    parser = argparse.ArgumentParser(description="Serve a fake plot feed for local development")
    parser.add_argument("--port", type=int, default=9000)
    parser.add_argument("--plots", type=int, default=len(PLOTS), help="Number of plots to report")
    parser.add_argument("--drop", type=int, action="append", default=[], help="Plot id to leave out (repeatable)")
    args = parser.parse_args()

    app = FastAPI(title="Mock plot feed")
    dropped = set(args.drop)

    @app.get("/")
    def feed():
        return build_payload(args.plots, dropped)

    uvicorn.run(app, host="127.0.0.1", port=args.port)


if __name__ == "__main__":
    main()
