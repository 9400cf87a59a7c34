from __future__ import annotations

from datetime import date


def get_today() -> date:
    """Reference date for every budget evaluation in a request; overridden in tests."""
    return date.today()
