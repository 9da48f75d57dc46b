"""
Settings loading tests: packaged defaults, override files, environment.
"""

from decimal import Decimal

import pytest

from payments_config import get_settings
from payments_config.bridges import (
    build_cap_policy,
    build_engine_from_settings,
)
from payments_config.loader import merge_settings
from payments_kernel.domain.deposit_cap import ZeroOutstandingPolicy


@pytest.fixture(autouse=True)
def _no_url_env(monkeypatch):
    monkeypatch.delenv("PAYMENTS_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)


@pytest.fixture
def write_config(tmp_path):
    def _write(body: str):
        path = tmp_path / "override.yaml"
        path.write_text(body)
        return path

    return _write


class TestDefaults:

    def test_packaged_defaults(self):
        settings = get_settings()

        assert settings.database.url == "sqlite:///payments.sqlite3"
        assert settings.database.lock_timeout_ms == 5000
        assert settings.deposits.cap_ratio == Decimal("0.25")
        assert settings.deposits.zero_outstanding_policy == "reject"
        assert settings.logging.level == "INFO"

    def test_settings_are_frozen(self):
        settings = get_settings()
        with pytest.raises(AttributeError):
            settings.deposits.cap_ratio = Decimal("1")


class TestOverrides:

    def test_override_file_merges_over_defaults(self, write_config):
        path = write_config(
            "deposits:\n"
            "  cap_ratio: 0.5\n"
            "  zero_outstanding_policy: uncapped\n"
            "logging:\n"
            "  level: debug\n"
        )

        settings = get_settings(path)

        assert settings.deposits.cap_ratio == Decimal("0.5")
        assert settings.deposits.zero_outstanding_policy == "uncapped"
        assert settings.logging.level == "DEBUG"
        assert settings.database.pool_size == 20

    def test_env_url_wins(self, monkeypatch, write_config):
        path = write_config("database:\n  url: sqlite:///from_file.db\n")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///from_database_url.db")
        monkeypatch.setenv("PAYMENTS_DATABASE_URL", "sqlite:///from_payments_url.db")

        assert get_settings(path).database.url == "sqlite:///from_payments_url.db"

    def test_database_url_fallback(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///fallback.db")

        assert get_settings().database.url == "sqlite:///fallback.db"

    def test_missing_override_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_settings(tmp_path / "missing.yaml")

    def test_merge_is_recursive(self):
        merged = merge_settings(
            {"database": {"url": "a", "pool_size": 1}},
            {"database": {"pool_size": 2}},
        )

        assert merged == {"database": {"url": "a", "pool_size": 2}}


class TestValidation:

    @pytest.mark.parametrize(
        "body",
        [
            "deposits:\n  cap_ratio: 0\n",
            "deposits:\n  cap_ratio: 1.5\n",
            "deposits:\n  cap_ratio: lots\n",
            "deposits:\n  zero_outstanding_policy: sometimes\n",
            "database:\n  pool_size: 0\n",
            "database:\n  lock_timeout_ms: fast\n",
            "database:\n  url: ''\n",
            "logging:\n  level: loud\n",
        ],
    )
    def test_bad_values_raise(self, write_config, body):
        with pytest.raises(ValueError):
            get_settings(write_config(body))

    def test_non_mapping_file_raises(self, write_config):
        with pytest.raises(ValueError, match="mapping"):
            get_settings(write_config("- just\n- a list\n"))


class TestBridges:

    def test_cap_policy_from_settings(self, write_config):
        settings = get_settings(
            write_config("deposits:\n  cap_ratio: '0.4'\n  zero_outstanding_policy: uncapped\n")
        )

        policy = build_cap_policy(settings)

        assert policy.ratio == Decimal("0.4")
        assert policy.zero_outstanding == ZeroOutstandingPolicy.UNCAPPED

    def test_engine_from_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PAYMENTS_DATABASE_URL", f"sqlite:///{tmp_path / 'bridge.db'}")

        engine = build_engine_from_settings(get_settings())
        try:
            assert engine.dialect.name == "sqlite"
        finally:
            engine.dispose()
