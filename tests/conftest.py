from __future__ import annotations

import pytest

from tests.unit.helpers import FixedClock, make_config, make_schema


@pytest.fixture
def schema():
    return make_schema()


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def clock():
    return FixedClock()
