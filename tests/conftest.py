from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from invitable.adapters.dev_email import DevEmailAdapter
from invitable.adapters.sqlite.migrator import SQLiteMigrator
from invitable.adapters.sqlite.repos import SQLiteAccountRepo
from invitable.app_shell.context import ServiceContext
from invitable.rules.loader import load_rules
from invitable.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent


class MockTimePort:
    """Mock time port for deterministic testing."""

    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._time = fixed_time or datetime(2025, 1, 1, 9, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._time

    def advance(self, delta: timedelta) -> None:
        self._time = self._time + delta


@pytest.fixture
def time_port() -> MockTimePort:
    return MockTimePort()


@pytest.fixture
def rules() -> Rules:
    """The real rules.yaml shipped at the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "invitable.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def account_repo(db_path: str) -> SQLiteAccountRepo:
    return SQLiteAccountRepo(db_path)


@pytest.fixture
def email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def test_ctx(
    rules: Rules,
    db_path: str,
    email_adapter: DevEmailAdapter,
    time_port: MockTimePort,
) -> ServiceContext:
    """Full ServiceContext backed by a temporary SQLite DB."""
    return ServiceContext.create(rules, db_path=db_path, email=email_adapter, clock=time_port)
