# pulse/settings.py
import os
from typing import List, Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


def allowed_origins() -> List[str]:
    raw_origins = os.getenv("PULSE_ALLOWED_ORIGINS") or "*"
    origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    return origins or ["*"]


def events_path() -> Optional[str]:
    return os.getenv("PULSE_EVENTS_PATH") or None


def events_url() -> Optional[str]:
    return os.getenv("PULSE_EVENTS_URL") or None
