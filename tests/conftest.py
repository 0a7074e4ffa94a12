import io

import pytest
from rich.console import Console

from reef.driver.session import Session
from reef.lexer.lexer import Lexer
from reef.parser.parser import Parser
from reef.system.models import InterpreterConfig

# --- Core Components ---

@pytest.fixture
def output():
    """Captures what 'log' statements write."""
    return io.StringIO()


@pytest.fixture
def session(output):
    """Provides a Session with default settings writing 'log' output to a buffer."""
    return Session(InterpreterConfig(), output=output)


@pytest.fixture
def console_buffer():
    return io.StringIO()


@pytest.fixture
def console(console_buffer):
    """A plain (no colour, no terminal) rich Console writing into a buffer."""
    return Console(file=console_buffer, force_terminal=False, color_system=None, width=200)


@pytest.fixture
def parse():
    """Returns a helper that lexes and parses source text into a Program."""
    def _parse(source):
        return Parser(Lexer(source).tokenize()).parse()
    return _parse


@pytest.fixture
def run(session):
    """Returns a helper that runs source in the shared session and asserts success."""
    def _run(source):
        result = session.run(source)
        assert result.ok, result.error.format() if result.error else result
        return result.value
    return _run
