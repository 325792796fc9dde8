"""
Mediflow Handover - Configuration
=================================
Runtime settings loaded from the environment (and the project ``.env``).
Gemini-specific settings live in ``mediflow.core.llm.gemini_client.GeminiConfig``.
"""
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_TIMEZONE = "Asia/Seoul"
DEFAULT_MAX_SUMMARY_CHARS = 20000
MAX_ADDITIONAL_NOTES_CHARS = 2000

NowFn = Callable[[], datetime]


@dataclass
class Settings:
    """Application settings; every field can be overridden from the environment."""
    timezone: str = field(default_factory=lambda: os.getenv("MEDIFLOW_TIMEZONE", DEFAULT_TIMEZONE))
    log_level: str = field(default_factory=lambda: os.getenv("MEDIFLOW_LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("MEDIFLOW_LOG_FILE") or None)
    max_summary_chars: int = field(
        default_factory=lambda: int(os.getenv("MEDIFLOW_MAX_SUMMARY_CHARS", str(DEFAULT_MAX_SUMMARY_CHARS)))
    )

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def now_fn(self) -> NowFn:
        """Clock returning aware datetimes in the configured zone."""
        tz = self.tzinfo
        return lambda: datetime.now(tz)
