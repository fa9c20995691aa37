"""Tests for Settings (config.py)."""
import pytest
from pydantic import ValidationError

from floatcraft import Settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("WORKER_COUNT", "WEAR_DIGITS", "PRICE_DIGITS",
                    "MAX_RESULTS", "CANCEL_CHECK_INTERVAL"):
            monkeypatch.delenv(f"FLOATCRAFT_{var}", raising=False)
        s = Settings(_env_file=None)
        assert s.worker_count >= 1
        assert s.wear_digits == 12
        assert s.price_digits == 4
        assert s.max_results == 100
        assert s.cancel_check_interval == 4096

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOATCRAFT_MAX_RESULTS", "5")
        monkeypatch.setenv("FLOATCRAFT_WORKER_COUNT", "3")
        s = Settings(_env_file=None)
        assert s.max_results == 5
        assert s.worker_count == 3

    def test_invalid_value_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOATCRAFT_WORKER_COUNT", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
