"""
Process-wide settings, read once from the environment (and .env if present).
Adapters receive these dataclasses through their constructors.
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class TestPgSettings:
    base_url: str
    api_key: str
    iv: str
    timeout_seconds: float


@dataclass(frozen=True)
class PgSettings:
    test_pg: TestPgSettings
    mock_pg_enabled: bool


def load_pg_settings() -> PgSettings:
    return PgSettings(
        test_pg=TestPgSettings(
            base_url=os.getenv("TEST_PG_BASE_URL", "https://api-test-pg.bigs.im"),
            api_key=os.getenv("TEST_PG_API_KEY", ""),
            iv=os.getenv("TEST_PG_IV", ""),
            timeout_seconds=float(os.getenv("TEST_PG_TIMEOUT_SECONDS", "10")),
        ),
        mock_pg_enabled=_env_flag("MOCK_PG_ENABLED"),
    )
