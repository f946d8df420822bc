"""Shared fixtures."""

from __future__ import annotations

import pytest

from dataorganizer.logging import set_log_dir


@pytest.fixture(autouse=True)
def _unbind_event_sink():
    """Keep the module-level event sink from leaking between tests."""
    yield
    set_log_dir(None)
