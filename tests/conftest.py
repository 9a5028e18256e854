"""
Shared pytest fixtures and configuration for Purely tests.
"""

import pytest

from purely import TurnScheduler, _reset_default_scheduler


@pytest.fixture(autouse=True)
def reset_default_scheduler():
    """Reset the thread's default scheduler before each test to prevent state leakage."""
    _reset_default_scheduler()
    yield
    _reset_default_scheduler()


@pytest.fixture
def scheduler():
    """Provide a fresh TurnScheduler for tests that drive turns explicitly."""
    return TurnScheduler()


@pytest.fixture
def run_turn(scheduler):
    """Run a callable in its own scheduler turn and return its result."""

    def run(callback):
        results = []
        scheduler.schedule(lambda: results.append(callback()))
        scheduler.run_pending()
        return results[0]

    return run
