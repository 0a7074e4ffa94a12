"""
Tests for the command-line entry point.
"""
from unittest.mock import patch

import pytest

from reef.main import build_parser, main


@pytest.fixture(autouse=True)
def mock_setup_logging():
    """Keeps CLI runs from reconfiguring the root logger used by pytest."""
    with patch("reef.main.setup_logging") as mocked:
        yield mocked


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.path is None
    assert args.debug == 0
    assert args.max_depth == 200
    assert args.log_file is None


def test_runs_file_and_returns_exit_code(tmp_path, capsys):
    script = tmp_path / "ok.reef"
    script.write_text('fun greet(n) { return "hi " + n; } log greet("reef");', encoding="utf-8")
    assert main([str(script)]) == 0
    assert capsys.readouterr().out == "hi reef\n"


def test_failing_file_returns_one(tmp_path, capsys):
    script = tmp_path / "bad.reef"
    script.write_text("log undefinedName;", encoding="utf-8")
    assert main([str(script)]) == 1
    assert "UndefinedVariableError at 1:5: Undefined variable 'undefinedName'" in capsys.readouterr().err


def test_missing_file_returns_two(tmp_path):
    assert main([str(tmp_path / "nope.reef")]) == 2


def test_max_depth_option(tmp_path, capsys):
    script = tmp_path / "deep.reef"
    script.write_text("fun d(n) { if n == 0 then { return 0; } return d(n - 1); } log d(20);", encoding="utf-8")
    assert main([str(script), "--max-depth", "10"]) == 1
    assert "StackOverflowError" in capsys.readouterr().err
    assert main([str(script), "--max-depth", "50"]) == 0


@pytest.mark.parametrize("argv", [["--debug", "-1"], ["--max-depth", "0"], ["--max-depth", "200000"]])
def test_invalid_option_values_are_usage_errors(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 2


def test_debug_and_log_file_options_configure_logging(tmp_path, mock_setup_logging):
    script = tmp_path / "t.reef"
    script.write_text("1 + 1;", encoding="utf-8")
    log_file = str(tmp_path / "logs" / "reef.log")
    assert main([str(script), "-d", "2", "--log-file", log_file]) == 0
    mock_setup_logging.assert_called_once_with("DEBUG", log_file)


def test_default_logging_level(tmp_path, mock_setup_logging):
    script = tmp_path / "t.reef"
    script.write_text("", encoding="utf-8")
    assert main([str(script)]) == 0
    mock_setup_logging.assert_called_once_with("WARNING", None)


def test_without_path_starts_repl():
    with patch("reef.main.Repl") as mock_repl:
        assert main([]) == 0
    mock_repl.assert_called_once()
    mock_repl.return_value.start.assert_called_once()
