"""Application constants read from ``VITE_*`` environment variables."""
from __future__ import annotations

import os
from typing import List, Optional

from config import settings  # noqa: F401  (loads the project .env)


def assert_present(value: Optional[str], name: str) -> None:
    """Raise ``ValueError`` when a required environment variable is missing or empty."""
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")


def parse_feature_flags(raw: Optional[str]) -> List[str]:
    return [flag.strip() for flag in (raw or "").split(",") if flag.strip()]


APP_NAME: str = os.getenv("VITE_APP_NAME") or "ai-in-action-workshop-level2-ui"

API_BASE_URL: str = os.getenv("VITE_API_BASE_URL") or "http://localhost:3000/api"

# Optional, no assertion
FEATURE_FLAGS: str = os.getenv("VITE_FEATURE_FLAGS") or ""

assert_present(APP_NAME, "VITE_APP_NAME")
assert_present(API_BASE_URL, "VITE_API_BASE_URL")

FEATURE_FLAGS_LIST: List[str] = parse_feature_flags(FEATURE_FLAGS)
