"""
Configuration loading.

Non-secret settings come from ``config.yaml`` at the project root; secrets
(API keys, Supabase URL) come from the environment, optionally via a
``.env`` file.

Example config.yaml
-------------------
    deepseek:
      model: deepseek-chat
      temperature: 0.7
    cache:
      ttl_seconds: 300
    economy:
      chat_cost: 2
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

load_dotenv()

_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config.yaml"


@lru_cache(maxsize=1)
def load_config() -> Dict[str, Any]:
    """Return the parsed config.yaml, or an empty dict if it is missing."""
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def get_section(name: str) -> Dict[str, Any]:
    """Return one top-level section of the config (empty dict if absent)."""
    section = load_config().get(name) or {}
    return dict(section)
