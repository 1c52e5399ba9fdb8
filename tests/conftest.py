"""
Pytest fixtures and configuration for vmmaint tests.
"""
from datetime import datetime

import pytest

from vmmaint.di import set_container
from vmmaint.interfaces.identity import StaticIdentityProvider

from fakes import FakeRunner, FakeSnapshotAPI


@pytest.fixture
def identity():
    return StaticIdentityProvider("vm1", "us-central1-a")


@pytest.fixture
def fake_api():
    return FakeSnapshotAPI()


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 6, 2, 2, 0, 5)


@pytest.fixture(autouse=True)
def reset_container():
    """Keep the global DI container from leaking between tests."""
    set_container(None)
    yield
    set_container(None)
