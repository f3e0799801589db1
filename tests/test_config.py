"""Tests for settings and logging configuration."""

import logging

import pytest
import structlog
from py_terrain.config import Settings, get_template, settings
from py_terrain.utils.arrays import create_typed_array, get_typed_array_dtype
from py_terrain.utils.logging import configure_logging


class TestSettings:
    """Test environment driven settings."""

    def test_defaults(self):
        assert settings.max_depression_iterations > 0
        assert settings.default_cells_desired <= settings.max_cells_desired

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("MIN_RIVER_FLUX", "45")
        monkeypatch.setenv("LOG_FORMAT", "console")
        overridden = Settings()
        assert overridden.min_river_flux == 45
        assert overridden.log_format == "console"

    def test_template_lookup_exported(self):
        assert get_template("atoll").name == "atoll"


class TestLogging:
    """Test structlog setup."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        level = logging.getLogger().level
        yield
        structlog.reset_defaults()
        logging.getLogger().setLevel(level)

    @pytest.mark.parametrize("log_format, renderer", [
        ("json", structlog.processors.JSONRenderer),
        ("console", structlog.dev.ConsoleRenderer),
    ])
    def test_renderer(self, log_format, renderer):
        configure_logging(Settings(log_format=log_format, log_level="DEBUG"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], renderer)
        assert logging.getLogger().level == logging.DEBUG


class TestTypedArrays:
    """Test id array sizing."""

    @pytest.mark.parametrize("max_value, dtype", [
        (0, "uint8"), (255, "uint8"), (256, "uint16"),
        (65535, "uint16"), (65536, "uint32"), (2 ** 32, "uint64"),
    ])
    def test_dtype(self, max_value, dtype):
        assert get_typed_array_dtype(max_value) == dtype

    def test_create(self):
        array = create_typed_array(1000, 5)
        assert array.dtype == "uint16"
        assert len(array) == 5
        assert not array.any()

    def test_negative(self):
        with pytest.raises(ValueError):
            get_typed_array_dtype(-1)
