"""Settings from the environment (WORKLOG_*). Command-line arguments take precedence."""

from __future__ import annotations

import logging
import os
import sys
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from pydantic import BaseModel, ValidationError

from .errors import InvocationError


class Settings(BaseModel):
    hourly_rate: Decimal = Decimal("200")
    email: Optional[str] = None  # printed on invoices when set
    fallback_date: Optional[date] = None  # weekly prediction stats only; unset means bad dates are fatal
    log_level: str = "WARNING"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    raw = {
        "hourly_rate": env.get("WORKLOG_HOURLY_RATE", "").strip() or None,
        "email": env.get("WORKLOG_EMAIL", "").strip() or None,
        "fallback_date": env.get("WORKLOG_FALLBACK_DATE", "").strip() or None,
        "log_level": env.get("WORKLOG_LOG_LEVEL", "").strip().upper() or None,
    }
    try:
        return Settings.model_validate({k: v for k, v in raw.items() if v is not None})
    except ValidationError as exc:
        raise InvocationError(f"invalid WORKLOG_* environment setting: {exc}") from exc


def configure_logging(level: str = "WARNING") -> None:
    """Log to stderr; stdout carries reports (and JSON-RPC for the MCP server)."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )
