"""Test helpers for mockstdin."""
from __future__ import annotations

import sys
import time

LINES = ["Aragorn", "Boromir", "Gandalf", "Gimli", "Legolas"]
CONTENTS = "".join(line + "\n" for line in LINES)

# Long enough that a feed of LINES is still running when a test inspects it.
TEST_DELAY = 0.2


def read_lines_timed() -> list[tuple[float, str]]:
    """Read sys.stdin to EOF; return (monotonic arrival time, line) pairs."""
    out: list[tuple[float, str]] = []
    for line in sys.stdin:
        out.append((time.monotonic(), line))
    return out
