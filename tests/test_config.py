"""Tests for environment configuration"""
import pytest
from decimal import Decimal

from poscart.config import Settings, get_settings


class TestSettings:

    def test_test_environment_defaults(self):
        settings = get_settings()

        assert settings.storage_backend == "memory"
        assert settings.tax_rate == Decimal("0")
        assert get_settings() is settings

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CART_STORAGE_BACKEND", " Redis ")
        monkeypatch.setenv("CART_TAX_RATE", "0.07")
        monkeypatch.setenv("CART_SESSION_ID", "till-2")

        settings = Settings.from_env()

        assert settings.storage_backend == "redis"
        assert settings.tax_rate == Decimal("0.07")
        assert settings.session_id == "till-2"

    def test_file_backend_default_path(self, monkeypatch):
        monkeypatch.setenv("CART_STORAGE_BACKEND", "file")
        monkeypatch.delenv("CART_STORAGE_PATH", raising=False)

        assert Settings.from_env().storage_path.endswith("cart.json")

    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("CART_STORAGE_BACKEND", "sqlite")
        with pytest.raises(ValueError, match="CART_STORAGE_BACKEND"):
            Settings.from_env()

    def test_negative_tax_rate(self, monkeypatch):
        monkeypatch.setenv("CART_TAX_RATE", "-0.1")
        with pytest.raises(ValueError, match="CART_TAX_RATE"):
            Settings.from_env()
