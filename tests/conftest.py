from __future__ import annotations

from datetime import UTC, datetime

import pytest

from st_fault_boundary import LogStore

FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0, 123000, tzinfo=UTC)
STAMP = "[2026-01-01T12:00:00.123Z]"


@pytest.fixture
def store() -> LogStore:
    return LogStore(clock=lambda: FIXED_NOW)
