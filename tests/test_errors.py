"""Unit tests for the error hierarchy and logging setup."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from nodeforge.errors import (
    GenerationError,
    NodeforgeError,
    PostGenerationError,
    ProjectValidationError,
)
from nodeforge.logger import get_logger, setup_logging

pytestmark = pytest.mark.unit


class TestErrors:
    def test_hierarchy(self):
        for cls in (ProjectValidationError, GenerationError, PostGenerationError):
            assert issubclass(cls, NodeforgeError)

    def test_validation_error_carries_field(self):
        exc = ProjectValidationError("port", "must be between 1 and 65535")
        assert exc.field == "port"
        assert str(exc) == "port: must be between 1 and 65535"

    def test_generation_error_carries_step(self):
        exc = GenerationError("backend", "disk full")
        assert exc.step == "backend"
        assert "during backend" in str(exc)

    def test_post_generation_error_carries_action(self):
        exc = PostGenerationError("npm install (backend)", "exit code 1")
        assert exc.action == "npm install (backend)"
        assert str(exc) == "npm install (backend) failed: exit code 1"


class TestLogger:
    def test_get_logger_prefixes_names(self):
        assert get_logger("tests.sample").name == "nodeforge.tests.sample"
        assert get_logger("nodeforge.cli").name == "nodeforge.cli"
        assert get_logger("nodeforge").name == "nodeforge"

    def test_setup_logging_adds_one_handler(self):
        root = setup_logging()
        setup_logging()
        handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert root.propagate is False

    def test_levels(self):
        assert setup_logging(verbose=True).level == logging.DEBUG
        assert setup_logging(level="info").level == logging.INFO
        assert setup_logging(level="bogus").level == logging.WARNING
        assert setup_logging().level == logging.WARNING
