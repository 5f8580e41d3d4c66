"""
Service configuration.

Responsibilities:
- Load environment overrides from the project ``.env`` file.
- Expose frozen config objects for the web app and the LLM layer.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "cookmate-secret-change-in-production")
    seed_catalog: bool = _env_flag("COOKMATE_SEED_CATALOG", True)
    seed_demo_users: bool = _env_flag("COOKMATE_SEED_USERS", True)
    seed_path: Path = Path(
        os.getenv(
            "COOKMATE_SEED_PATH",
            str(Path(__file__).resolve().parent / "data" / "recipes.json"),
        )
    )
    log_level: str = os.getenv("COOKMATE_LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = "llama-3.3-70b-versatile"
    timeout: float = 10.0
    max_tokens: int = 1024
    enabled: bool = True


DEFAULT_APP_CONFIG = AppConfig()
DEFAULT_LLM_CONFIG = LLMConfig()
