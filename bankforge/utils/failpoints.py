"""Bankforge - Failpoint injection for resilience testing.

Deterministic crash injection used to verify that an interrupted build
never leaves a half-written manifest or archive at its final path.

Safety gate: failpoints are only active when BANKFORGE_ENABLE_FAILPOINTS=1.
The default is a complete no-op.

Environment variables:
- BANKFORGE_ENABLE_FAILPOINTS: "1" enables the failpoint system
- BANKFORGE_FAILPOINT: name of the failpoint to trigger
- BANKFORGE_FAILPOINT_EXIT_CODE: exit code used when crashing (default: 42)
"""

from __future__ import annotations

import os

_PREFIX = "FAILPOINT_"


def _normalize(point: str) -> str:
    point = point.upper()
    if point.startswith(_PREFIX):
        point = point[len(_PREFIX) :]
    return point


def is_failpoint_enabled() -> bool:
    """Check if the failpoint system is enabled."""
    return os.environ.get("BANKFORGE_ENABLE_FAILPOINTS") == "1"


def get_active_failpoint() -> str | None:
    """Get the armed failpoint name (without FAILPOINT_ prefix), if any."""
    if not is_failpoint_enabled():
        return None
    target = os.environ.get("BANKFORGE_FAILPOINT", "")
    if not target:
        return None
    return _normalize(target)


def maybe_fail(point: str) -> None:
    """Crash the process if point is the armed failpoint.

    Uses os._exit() so that no finally block or atexit hook runs, which is
    what a power loss looks like to the files on disk.

    Args:
        point: Failpoint name, with or without the FAILPOINT_ prefix.
    """
    active = get_active_failpoint()
    if active is None or active != _normalize(point):
        return

    try:
        exit_code = int(os.environ.get("BANKFORGE_FAILPOINT_EXIT_CODE", "42"))
    except ValueError:
        exit_code = 42

    os._exit(exit_code)
