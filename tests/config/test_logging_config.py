import logging
import sys
from unittest.mock import patch

import pytest

from reef.config.logging_config import LOG_FORMAT, get_logger, level_for_debug, setup_logging


@pytest.mark.parametrize("debug_level, expected", [(0, "WARNING"), (1, "INFO"), (2, "DEBUG"), (5, "DEBUG")])
def test_level_for_debug(debug_level, expected):
    assert level_for_debug(debug_level) == expected


def test_setup_logging_to_stderr():
    with patch("logging.basicConfig") as basic_config:
        setup_logging("debug")
    basic_config.assert_called_once_with(level=logging.DEBUG, format=LOG_FORMAT, force=True, stream=sys.stderr)


def test_setup_logging_to_file_creates_directory(tmp_path):
    log_file = tmp_path / "nested" / "reef.log"
    with patch("logging.basicConfig") as basic_config:
        setup_logging("INFO", str(log_file))
    assert log_file.parent.is_dir()
    basic_config.assert_called_once_with(level=logging.INFO, format=LOG_FORMAT, force=True, filename=str(log_file))


def test_unknown_level_falls_back_to_warning():
    with patch("logging.basicConfig") as basic_config:
        setup_logging("chatty")
    assert basic_config.call_args.kwargs["level"] == logging.WARNING


def test_get_logger():
    assert get_logger("reef.test") is logging.getLogger("reef.test")
