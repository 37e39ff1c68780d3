"""pytest fixtures for feeding scripted input to code under test.

Registered through the ``pytest11`` entry point, so installing mockstdin is
enough:

    def test_prompt(mock_stdin):
        with mock_stdin.feed(io.StringIO("alice\\n"), visible=False):
            assert input("name? ") == "alice"
"""
from __future__ import annotations

from typing import Generator

import pytest

from mockstdin.config import Config, load
from mockstdin.stdin import MockStdin


@pytest.fixture
def mockstdin_config(request: pytest.FixtureRequest) -> Config:
    """Settings from mockstdin.toml at the pytest rootdir (defaults if absent)."""
    return load(request.config.rootpath)


@pytest.fixture
def mock_stdin(mockstdin_config: Config) -> Generator[MockStdin, None, None]:
    """A fresh controller; any feed is stopped and sys.stdin restored on teardown."""
    controller = MockStdin.from_config(mockstdin_config)
    yield controller
    controller.restore()
