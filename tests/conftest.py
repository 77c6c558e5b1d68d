import os

import pytest

os.environ.setdefault("EPHEMERIS_BACKEND", "moseph")

from fakes import ALL_BODIES_AT, FixedBackend, ready_client


@pytest.fixture
def fixed_client():
    return ready_client(FixedBackend(ALL_BODIES_AT))
