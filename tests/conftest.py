"""Shared fixtures for scraper tests."""

import pytest

from fakes import FakeClock, FakeSleep


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
