from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.db import ensure_alert_log_indexes
from app.routes import register_routes

# Ensure backend/.env is loaded regardless of launch directory.
load_dotenv(Path(__file__).resolve().parents[1] / ".env")

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("eldercare")

app = FastAPI(title="ElderCare Notification API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_routes(app)


@app.on_event("startup")
def _startup() -> None:
    # Ensure indexes when Mongo is reachable (Atlas/local).
    try:
        ensure_alert_log_indexes()
    except Exception:
        logger.warning("[ALERT_LOG] Skipping index setup; database unavailable")
