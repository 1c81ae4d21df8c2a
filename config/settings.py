"""Central configuration for the banner QA suites.

Consolidates the OPCO registry, the target environment and the QA user agent
required to get past the security layer on the non-prod environments.

Values are resolved from the process environment (and a project ``.env``)
into the module-level ``SETTINGS`` dict. Call ``reload_settings()`` after
changing the environment at runtime.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import load_dotenv

from data.models import OpcoConfig

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
REGISTRY_PATH = Path(__file__).resolve().parent / "opcos.yml"

load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_OPCO = "stopandshop"
DEFAULT_ENVIRONMENT = "delta"

# Format: qa-reg-(pdl)-cua/VERSION; +reg/VERSION
DEFAULT_QA_USER_AGENT = "qa-reg-(pdl)-cua/05:01; +reg/18"
QA_USER_AGENT_PATTERN = re.compile(r"^qa-reg-\(pdl\)-cua/\d{2}:\d{2};\s\+reg/\d{2}$")

ACCEPTED_ENCODINGS = ["deflate", "gzip", "br", "zstd"]


def _load_registry(path: Path = REGISTRY_PATH) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        registry = yaml.safe_load(f) or {}
    if not registry.get("opcos"):
        raise ValueError(f"No OPCOs defined in {path}")
    return registry


_REGISTRY = _load_registry()

VALID_OPCOS: List[str] = list(_REGISTRY["opcos"].keys())
VALID_ENVIRONMENTS: List[str] = list(_REGISTRY.get("environments") or ["beta", "delta"])
OPCO_DISPLAY_NAMES: Dict[str, str] = {key: opco["name"] for key, opco in _REGISTRY["opcos"].items()}
URL_TEMPLATE: str = _REGISTRY.get("url_template", "https://nonprd-{env}.{opco}.com")


def is_valid_opco(opco: str) -> bool:
    return opco in VALID_OPCOS


def is_valid_environment(env: str) -> bool:
    return env in VALID_ENVIRONMENTS


def build_base_url(opco: str, env: str) -> str:
    """Build the non-prod base URL for an OPCO, e.g. ``https://nonprd-delta.foodlion.com/``."""
    return URL_TEMPLATE.format(env=env, opco=opco) + "/"


def build_url_for_opco(opco: str, env: str) -> str:
    return build_base_url(opco, env)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _build_settings() -> Dict[str, Any]:
    opco = os.getenv("TEST_OPCO") or DEFAULT_OPCO
    if not is_valid_opco(opco):
        raise ValueError(f"Invalid TEST_OPCO '{opco}'. Valid values: {', '.join(VALID_OPCOS)}")

    env = os.getenv("TEST_ENV") or DEFAULT_ENVIRONMENT
    if not is_valid_environment(env):
        raise ValueError(f"Invalid TEST_ENV '{env}'. Valid values: {', '.join(VALID_ENVIRONMENTS)}")

    user_agent = os.getenv("TEST_USER_AGENT") or DEFAULT_QA_USER_AGENT
    base_url = os.getenv("VITE_APP_BASE_URL") or build_base_url(opco, env)
    api_base_url = os.getenv("VITE_API_BASE_URL") or build_base_url(opco, env)

    return {
        "opco": opco,
        "environment": env,
        "base_url": base_url,
        "api_base_url": api_base_url,
        # All timeouts are in milliseconds, matching Playwright's units
        "timeouts": {
            "default": 5000,
            "navigation": 10000,
            "api": 15000,
            "long": 30000,
        },
        "retries": {
            "api": 3,
            "ui": 2,
        },
        "api": {
            "headers": {
                "User-Agent": user_agent,
                "Accept": "application/json, text/html, */*",
                "Accept-Encoding": "gzip, deflate, br",
            },
            "timeout": 15000,
        },
        "qa_user_agent": user_agent,
        "qa_client": {
            "base_url": base_url.rstrip("/"),
            "timeout": 30000,
            "retry_attempts": 3,
            "retry_delay": 1.0,
            "accepted_encodings": list(ACCEPTED_ENCODINGS),
        },
        "headless": _env_flag("HEADLESS_MODE", True),
        "screenshots": {
            "on_failure": True,
            "directory": os.getenv("QA_SCREENSHOT_DIR") or "test-results/screenshots",
        },
        "test_data": {
            "search_query": "milk",
            "category_id": "dairy",
            "product_id": "test-product-1",
        },
    }


SETTINGS: Dict[str, Any] = _build_settings()


def reload_settings() -> Dict[str, Any]:
    """Re-read the environment into ``SETTINGS`` in place."""
    fresh = _build_settings()
    SETTINGS.clear()
    SETTINGS.update(fresh)
    return SETTINGS


# ----------------------------------------------------------------------
# OPCO registry
# ----------------------------------------------------------------------
def get_opco_config(opco: str, env: Optional[str] = None) -> OpcoConfig:
    if not is_valid_opco(opco):
        raise ValueError(f"Unknown OPCO '{opco}'. Valid values: {', '.join(VALID_OPCOS)}")
    entry = _REGISTRY["opcos"][opco]
    environment = env or SETTINGS["environment"]
    return OpcoConfig(
        key=opco,
        name=entry["name"],
        url=URL_TEMPLATE.format(env=environment, opco=opco),
        expected_slot_name=entry["expected_slot_name"],
    )


def get_all_opco_configs(env: Optional[str] = None) -> List[Tuple[str, OpcoConfig]]:
    return [(key, get_opco_config(key, env)) for key in VALID_OPCOS]


def get_opco_names() -> List[str]:
    return [config.name for _, config in get_all_opco_configs()]


def get_opco_url(opco: str) -> str:
    return get_opco_config(opco).url


def get_opco_display_name(opco: str) -> str:
    return OPCO_DISPLAY_NAMES[opco]


def get_current_opco() -> str:
    return SETTINGS["opco"]


def get_current_environment() -> str:
    return SETTINGS["environment"]


def get_current_base_url() -> str:
    return SETTINGS["base_url"]


# ----------------------------------------------------------------------
# QA user agent
# ----------------------------------------------------------------------
def get_qa_user_agent() -> str:
    return SETTINGS["qa_user_agent"]


def get_user_agent() -> str:
    return get_qa_user_agent()


def is_valid_qa_user_agent(user_agent: Optional[str]) -> bool:
    if not user_agent:
        return False
    return bool(QA_USER_AGENT_PATTERN.match(user_agent))


def get_user_agent_with_fallback(custom_user_agent: Optional[str] = None) -> str:
    if custom_user_agent and is_valid_qa_user_agent(custom_user_agent):
        return custom_user_agent
    return get_qa_user_agent()


def has_valid_user_agent() -> bool:
    return is_valid_qa_user_agent(get_qa_user_agent())


def update_instructions() -> str:
    valid = "YES" if has_valid_user_agent() else "NO"
    return f"""
To update the QA User Agent:

METHOD 1 - Update Configuration File:
1. Open: config/settings.py
2. Find: DEFAULT_QA_USER_AGENT = "{DEFAULT_QA_USER_AGENT}"
3. Replace with new value
4. Save and restart tests

METHOD 2 - Environment Variable (or .env):
export TEST_USER_AGENT="qa-reg-(pdl)-cua/NEW:VERSION; +reg/NEW"
pytest

METHOD 3 - Runtime Override:
TEST_USER_AGENT="qa-reg-(pdl)-cua/06:02; +reg/19" pytest

Current User Agent: {get_qa_user_agent()}
Valid Format: {valid}
"""


def log_user_agent_config() -> None:
    rule = "=" * 51
    logger.info(rule)
    logger.info("QA User Agent Configuration")
    logger.info(rule)
    logger.info("User Agent: %s", get_qa_user_agent())
    logger.info("Valid Format: %s", "YES" if has_valid_user_agent() else "NO")
    logger.info("Environment: %s", SETTINGS["environment"])
    logger.info("OPCO: %s", SETTINGS["opco"])
    logger.info("Base URL: %s", SETTINGS["base_url"])
    logger.info(rule)
