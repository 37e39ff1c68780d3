"""Shared test fixtures for mockstdin.

Fixture tiers:
  mock_stdin    — fresh MockStdin from the pytest plugin, restored on teardown
  lines_file    — text file with the reference lines fed in most tests
  fast_stdin    — MockStdin with a short join timeout, for blocked-writer tests
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Generator

import pytest

from mockstdin.pytest_plugin import mock_stdin, mockstdin_config  # noqa: F401
from mockstdin.stdin import MockStdin
from tests.helpers import CONTENTS

pytest_plugins = ["pytester"]

# ---------------------------------------------------------------------------
# Source fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def lines_file(tmp_path: Path) -> Path:
    """A UTF-8 file holding CONTENTS."""
    path = tmp_path / "stdin.txt"
    path.write_text(CONTENTS, encoding="utf-8")
    return path


@pytest.fixture
def source(lines_file: Path) -> Generator:
    """lines_file opened for reading; closed by the test, not the controller."""
    with open(lines_file, encoding="utf-8") as f:
        yield f


# ---------------------------------------------------------------------------
# Controller fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fast_stdin() -> Generator[MockStdin, None, None]:
    """MockStdin that gives up on a blocked feeder after 0.2s."""
    controller = MockStdin(join_timeout=0.2, visible=False)
    yield controller
    controller.restore()


@pytest.fixture(autouse=True)
def _stdin_untouched() -> Generator[None, None, None]:
    """Fail loudly if a test leaves sys.stdin pointing at a pipe."""
    before = sys.stdin
    yield
    assert sys.stdin is before, "test leaked a mocked sys.stdin"
