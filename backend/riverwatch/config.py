# backend/riverwatch/config.py
import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _flag(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _origins(raw: str) -> List[str]:
    # unset or blank means any origin
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    return int(raw)


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./riverwatch.db")
TICK_INTERVAL_SEC = float(os.getenv("TICK_INTERVAL_SEC", "5"))
SIM_SEED = _optional_int(os.getenv("SIM_SEED"))
AUTOSTART_SIM = _flag(os.getenv("AUTOSTART_SIM", "1"))
ALERT_WEBHOOK_URL = os.getenv("ALERT_WEBHOOK_URL") or None
CORS_ORIGINS = _origins(os.getenv("CORS_ORIGINS", ""))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
