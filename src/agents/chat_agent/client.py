"""DeepSeek client initialisation for the character chat agent.

DeepSeek exposes an OpenAI-compatible API, so the official ``openai`` SDK is
used with a custom ``base_url``.
"""

import os

from dotenv import load_dotenv
from openai import OpenAI

from src.utils.config import get_section

load_dotenv()

_deepseek_cfg = get_section("deepseek")

BASE_URL: str = _deepseek_cfg.get("base_url", "https://api.deepseek.com/v1")
MODEL: str = _deepseek_cfg.get("model", "deepseek-chat")
TEMPERATURE: float = float(_deepseek_cfg.get("temperature", 0.7))
MAX_TOKENS: int = int(_deepseek_cfg.get("max_tokens", 2000))
HISTORY_LIMIT: int = int(_deepseek_cfg.get("history_limit", 10))


def get_client() -> OpenAI:
    """Return an initialised client pointed at the DeepSeek API."""
    api_key = os.environ.get("DEEPSEEK_API_KEY")
    if not api_key:
        raise EnvironmentError(
            "DEEPSEEK_API_KEY is not set. "
            "Add it to your environment or to a .env file in the project root."
        )
    return OpenAI(api_key=api_key, base_url=BASE_URL)
