from __future__ import annotations

import logging
import os
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Any, Optional
from urllib.parse import quote_plus, urlsplit

import certifi
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from app.services.dates import local_midnight_utc

logger = logging.getLogger("eldercare")

PROFILES = "elderly_profiles"
APPOINTMENTS = "appointments"
ACTIVITIES = "activities"
DAILY_LOGS = "daily_logs"
ALERT_LOGS = "alert_logs"


def _build_mongodb_uri() -> str:
    # Prefer a full URI when provided (Atlas/local, replica sets, etc.).
    uri = os.environ.get("MONGODB_URI")
    if uri:
        return uri

    host = os.environ.get("MONGO_HOST", "localhost")
    port = os.environ.get("MONGO_PORT", "27017")
    db = os.environ.get("MONGO_DB", "eldercare")

    user = os.environ.get("MONGO_USER")
    password = os.environ.get("MONGO_PASSWORD")
    auth_source = os.environ.get("MONGO_AUTH_SOURCE", db)

    if user and password:
        u = quote_plus(user)
        p = quote_plus(password)
        a = quote_plus(auth_source)
        return f"mongodb://{u}:{p}@{host}:{port}/{db}?authSource={a}"

    return f"mongodb://{host}:{port}/{db}"


def mongo_uri_summary(uri: Optional[str] = None) -> dict:
    """
    Best-effort, non-sensitive summary of the configured Mongo URI.
    Useful for debugging whether the service is using Atlas vs localhost.
    """
    u = uri or _build_mongodb_uri()
    parts = urlsplit(u)

    netloc = parts.netloc
    # Redact userinfo if present: user:pass@host -> host
    if "@" in netloc:
        netloc = netloc.split("@", 1)[1]

    db_name = (parts.path or "").lstrip("/") or None

    return {
        "scheme": parts.scheme or None,
        "host": netloc or None,
        "db": db_name,
    }


def _client_kwargs(uri: str) -> dict:
    # Short timeouts so /health and the cron call fail fast when the DB is down.
    server_sel_ms = int(os.environ.get("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"))
    connect_ms = int(os.environ.get("MONGO_CONNECT_TIMEOUT_MS", "5000"))

    kwargs = {
        "serverSelectionTimeoutMS": server_sel_ms,
        "connectTimeoutMS": connect_ms,
        "tz_aware": True,
    }

    # Force a known CA bundle when using TLS (Atlas defaults to TLS).
    if uri.startswith("mongodb+srv://") or "tls=true" in uri or "ssl=true" in uri:
        kwargs["tlsCAFile"] = certifi.where()

    return kwargs


@lru_cache(maxsize=1)
def get_mongo_client() -> MongoClient:
    uri = _build_mongodb_uri()
    return MongoClient(uri, **_client_kwargs(uri))


def mongo_check() -> tuple[bool, dict, Optional[str]]:
    """
    Returns (ok, summary, error_string).
    """
    summary = mongo_uri_summary()
    try:
        get_mongo_client().admin.command("ping")
        return True, summary, None
    except Exception as e:
        # Avoid returning secrets; exception messages typically do not include creds.
        return False, summary, f"{e.__class__.__name__}: {e}"


def get_database() -> Database:
    client = get_mongo_client()
    try:
        db = client.get_default_database()
    except Exception:
        db = None
    if db is None:
        db_name = os.environ.get("MONGO_DB", "eldercare")
        db = client[db_name]
    return db


def ensure_alert_log_indexes(db: Optional[Database] = None) -> None:
    alert_logs = (db if db is not None else get_database())[ALERT_LOGS]
    try:
        alert_logs.create_index(
            [("type", ASCENDING), ("subjectId", ASCENDING), ("eventDate", ASCENDING)]
        )
        alert_logs.create_index([("createdAt", DESCENDING)])
    except Exception:
        # Index creation can fail on limited perms; the audit trail still works without it.
        logger.warning("[ALERT_LOG] Could not create alert_logs indexes", exc_info=True)


class CareStore:
    """Data-access handle over the care database.

    Read-only for profiles, appointments, activities and daily logs;
    append-only for the alert log. Constructed explicitly and passed to the
    sweep; `close()` releases the client when the store owns it.
    """

    def __init__(self, db: Database, *, client: Optional[MongoClient] = None):
        self._db = db
        self._client = client

    @classmethod
    def from_env(cls) -> "CareStore":
        # Shares the cached process client; close() is then a no-op.
        return cls(get_database())

    @classmethod
    def connect(cls, uri: Optional[str] = None) -> "CareStore":
        uri = uri or _build_mongodb_uri()
        client = MongoClient(uri, **_client_kwargs(uri))
        try:
            db = client.get_default_database()
        except Exception:
            db = client[os.environ.get("MONGO_DB", "eldercare")]
        return cls(db, client=client)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "CareStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Reads

    def active_profiles(self) -> list[dict]:
        return list(self._db[PROFILES].find({"isActive": True}))

    def pending_appointments(self, today: date, max_days_ahead: int = 30) -> list[dict]:
        """Open appointments from today up to `max_days_ahead` days out."""
        query = {
            "isCompleted": {"$ne": True},
            "date": {
                "$gte": local_midnight_utc(today),
                "$lt": local_midnight_utc(today + timedelta(days=max_days_ahead + 1)),
            },
        }
        return list(self._db[APPOINTMENTS].find(query).sort("date", ASCENDING))

    def active_activities(self) -> list[dict]:
        return list(self._db[ACTIVITIES].find({"isActive": True}))

    def latest_log_dates(self, profile_ids: list) -> dict[Any, datetime]:
        if not profile_ids:
            return {}
        pipeline = [
            {"$match": {"elderlyId": {"$in": profile_ids}}},
            {"$group": {"_id": "$elderlyId", "latest": {"$max": "$date"}}},
        ]
        return {row["_id"]: row["latest"] for row in self._db[DAILY_LOGS].aggregate(pipeline)}

    # Alert log

    def insert_alert_log(self, entry: dict) -> None:
        self._db[ALERT_LOGS].insert_one(dict(entry))

    def has_sent_alert(self, event_type: str, subject_id: str, event_date: str) -> bool:
        query = {
            "type": event_type,
            "subjectId": subject_id,
            "eventDate": event_date,
            "status": "SENT",
        }
        return self._db[ALERT_LOGS].find_one(query, projection={"_id": 1}) is not None

    def recent_alert_logs(self, limit: int = 20) -> list[dict]:
        return list(self._db[ALERT_LOGS].find().sort("createdAt", DESCENDING).limit(limit))
