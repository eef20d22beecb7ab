import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv(".env")

ENV_PREFIX = "TASK_MANAGER"


def _env(suffix: str, default: str) -> str:
    value = os.getenv(f"{ENV_PREFIX}_{suffix}")
    return default if value is None or value.strip() == "" else value.strip()


def _env_int(suffix: str, default: int) -> int:
    try:
        return int(_env(suffix, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"
    log_file: str = ""


def get_settings() -> Settings:
    """Read settings from the environment (and .env, if present)."""
    return Settings(
        host=_env("HOST", Settings.host),
        port=_env_int("PORT", Settings.port),
        log_level=_env("LOG_LEVEL", Settings.log_level).lower(),
        log_file=_env("LOG_FILE", Settings.log_file),
    )
