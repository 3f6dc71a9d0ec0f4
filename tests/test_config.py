"""Tests for configuration loading and the logging helpers."""

import logging

import pytest
from omegaconf import OmegaConf
from pydantic import ValidationError

from attkinpy.config import KinematicsConfig, load_config
from attkinpy.errors import MalformedInputError
from attkinpy.interpolation import AngularDerivativesFilter
from attkinpy.logging_utils import (
    DiagnosticFormatter,
    Formatter,
    LibraryFormatter,
    LoggingConfig,
    instance_logger_name,
    log_exception,
    setup_logging,
)

YAML_CONFIG = """
interpolation:
  filter: use_rra
  reference: first
  max_attempts: 3
logging:
  level: debug
  formatter: diagnostic
"""


# ===========================================================================
# Configuration
# ===========================================================================


class TestLoadConfig:

    def test_defaults(self):
        config = load_config()
        assert config == KinematicsConfig()
        assert config.interpolation.filter == AngularDerivativesFilter.USE_RR
        assert config.interpolation.reference == "closest"
        assert config.interpolation.max_attempts is None
        assert config.logging.level == "WARNING"
        assert config.logging.formatter == "library"

    def test_yaml(self, tmp_path):
        path = tmp_path / "kinematics.yaml"
        path.write_text(YAML_CONFIG)
        for source in (path, str(path)):
            config = load_config(source)
            assert config.interpolation.filter == AngularDerivativesFilter.USE_RRA
            assert config.interpolation.reference == "first"
            assert config.interpolation.max_attempts == 3
            assert config.logging.level == "DEBUG"
            assert config.logging.formatter == "diagnostic"

    def test_mapping(self):
        config = load_config({"interpolation": {"filter": "USE_R"}})
        assert config.interpolation.filter == AngularDerivativesFilter.USE_R
        assert config.logging == LoggingConfig()

    def test_dictconfig(self):
        config = load_config(OmegaConf.create({"logging": {"level": "error"}}))
        assert config.logging.level == "ERROR"

    def test_model_validate_dictconfig(self):
        config = KinematicsConfig.model_validate(OmegaConf.create(YAML_CONFIG))
        assert config.interpolation.max_attempts == 3

    def test_overrides(self):
        config = load_config(
            {"interpolation": {"filter": "use_r"}},
            overrides=["interpolation.filter=use_rra", "logging.level=info"],
        )
        assert config.interpolation.filter == AngularDerivativesFilter.USE_RRA
        assert config.logging.level == "INFO"

    def test_interpolated_values(self):
        cfg = OmegaConf.create({"order": 2, "interpolation": {"filter": "${order}"}})
        assert load_config(cfg).interpolation.filter == AngularDerivativesFilter.USE_RRA

    def test_missing_file(self, tmp_path):
        with pytest.raises(MalformedInputError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_source(self):
        with pytest.raises(MalformedInputError):
            load_config(42)

    @pytest.mark.parametrize(
        "source",
        [
            {"logging": {"formatter": "json"}},
            {"logging": {"level": "loud"}},
            {"interpolation": {"filter": "use_rrr"}},
            {"interpolation": {"max_attempts": 0}},
        ],
    )
    def test_invalid_values(self, source):
        with pytest.raises(ValidationError):
            load_config(source)


# ===========================================================================
# Logging
# ===========================================================================


class TestLogging:

    def test_level_normalization(self):
        assert LoggingConfig(level="info").level == "INFO"
        assert LoggingConfig(level=logging.DEBUG).level == "DEBUG"

    def test_formatters(self):
        assert isinstance(Formatter.get_formatter("library"), LibraryFormatter)
        assert isinstance(Formatter.get_formatter("diagnostic"), DiagnosticFormatter)
        with pytest.raises(ValueError):
            Formatter.get_formatter("json")

    def test_diagnostic_format(self):
        record = logging.LogRecord("attkinpy", logging.ERROR, __file__, 12, "boom", None, None, func="compute")
        message = Formatter.get_formatter("diagnostic").format(record)
        assert "compute:12" in message
        assert "boom" in message

    def test_setup_logging(self):
        logger = setup_logging("attkinpy.test_setup", "DEBUG", "diagnostic")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, DiagnosticFormatter)
        # set up twice, still one handler
        logger = setup_logging("attkinpy.test_setup", "INFO")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, LibraryFormatter)

    def test_log_exception(self, caplog):
        logger = logging.getLogger("attkinpy.test_log_exception")
        with caplog.at_level(logging.ERROR, logger=logger.name):
            try:
                raise MalformedInputError("bad sample")
            except MalformedInputError:
                log_exception(logger, "Unable to proceed")
        assert len(caplog.records) == 1
        message = caplog.records[0].getMessage()
        assert message.startswith("Unable to proceed - Exception occurred in")
        assert "bad sample" in message

    def test_instance_logger_names(self):
        class Worker:
            pass

        first, second = instance_logger_name(Worker()), instance_logger_name(Worker())
        assert first != second
        assert first.startswith("Worker.")
        assert second.startswith("Worker.")
