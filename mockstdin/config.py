"""Load default feed settings from mockstdin.toml."""
from __future__ import annotations

import math
import os
import sys
import threading
from dataclasses import dataclass

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]
from pathlib import Path

from mockstdin.errors import InvalidArgument

CONFIG_FILENAME = "mockstdin.toml"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Config:
    delay: float = 0.0  # seconds between lines
    visible: bool = True  # echo fed lines to stdout, like a terminal
    encoding: str = "utf-8"
    join_timeout: float | None = 5.0  # restore() waits this long before breaking a blocked write

    def __post_init__(self) -> None:
        self.delay = check_delay(self.delay)
        if self.join_timeout is not None and self.join_timeout < 0:
            raise InvalidArgument(f"join_timeout must be >= 0, got {self.join_timeout}")


def check_delay(d: object) -> float:
    """Return *d* as float seconds or raise InvalidArgument.

    Accepts ints, floats and datetime.timedelta. The upper bound is the
    longest timeout the threading primitives can wait on.
    """
    total_seconds = getattr(d, "total_seconds", None)
    if callable(total_seconds):
        d = total_seconds()
    if isinstance(d, bool) or not isinstance(d, (int, float)):
        raise InvalidArgument(f"delay must be a number of seconds, got {d!r}")
    if math.isnan(d) or d < 0:
        raise InvalidArgument(f"delay must be >= 0, got {d}")
    if d > threading.TIMEOUT_MAX:
        raise InvalidArgument(f"delay must be <= {threading.TIMEOUT_MAX}, got {d}")
    return float(d)


def _parse_bool(name: str, value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise InvalidArgument(f"{name} must be a boolean, got {value!r}")


def load(project_root: Path | None = None) -> Config:
    """Load config from mockstdin.toml; all fields have defaults."""
    if project_root is None:
        project_root = Path.cwd()

    toml_path = project_root / CONFIG_FILENAME
    data: dict = {}
    if toml_path.exists():
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)

    feed = data.get("feed", {})
    restore = data.get("restore", {})

    delay = feed.get("delay", 0.0)
    visible = feed.get("visible", True)

    # Environment wins over the file so a CI job can slow down or hide feeds.
    env_delay = os.environ.get("MOCKSTDIN_DELAY")
    if env_delay:
        try:
            delay = float(env_delay)
        except ValueError as e:
            raise InvalidArgument(f"MOCKSTDIN_DELAY must be a number, got {env_delay!r}") from e
    env_visible = os.environ.get("MOCKSTDIN_VISIBLE")
    if env_visible:
        visible = _parse_bool("MOCKSTDIN_VISIBLE", env_visible)

    if not isinstance(visible, bool):
        raise InvalidArgument(f"feed.visible must be a boolean, got {visible!r}")

    return Config(
        delay=delay,
        visible=visible,
        encoding=feed.get("encoding", "utf-8"),
        join_timeout=restore.get("join_timeout", 5.0),
    )
