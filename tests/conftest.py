# tests/conftest.py — shared fixtures for the FloatChat test suite
import itertools
from unittest.mock import Mock

import pytest
import requests

from floatchat.config import Settings
from floatchat.conversation import ConversationStore
from floatchat.models import FloatRecord, QueryResult


@pytest.fixture
def settings():
    return Settings(api_url="http://floatchat.test", request_timeout=5.0)


@pytest.fixture
def fixed_clock():
    """Clock stuck at one millisecond, so every id has to be bumped."""
    return lambda: 1_700_000_000_000


@pytest.fixture
def ticking_clock():
    counter = itertools.count(1_700_000_000_000, 5)
    return lambda: next(counter)


@pytest.fixture
def store(fixed_clock):
    return ConversationStore(clock=fixed_clock)


@pytest.fixture
def float_rows():
    return [
        {"float_id": "6901234", "wmo_id": "6901234", "latitude": "15.5", "longitude": "70.2",
         "status": "active", "ocean_region": "Arabian Sea", "total_profiles": 12, "country": "India"},
        {"float_id": "6901235", "wmo_id": "6901235", "latitude": -2.1, "longitude": 85.0,
         "status": "inactive", "ocean_region": "Bay of Bengal", "total_profiles": 4, "country": "France"},
        {"float_id": "6901236", "latitude": None, "longitude": None,
         "status": "lost", "ocean_region": "Arabian Sea", "total_profiles": 0},
    ]


@pytest.fixture
def floats(float_rows):
    return [FloatRecord.model_validate(r) for r in float_rows]


@pytest.fixture
def profile_rows():
    return [
        {"depth": 10, "temperature": 28.4, "salinity": None},
        {"depth": 50, "temperature": 22.1, "salinity": 35.0},
    ]


@pytest.fixture
def float_result(float_rows):
    return QueryResult.model_validate({"results": float_rows, "count": 3, "naturalQuery": "active floats"})


@pytest.fixture
def generic_result():
    return QueryResult.model_validate({
        "results": [{"region": "Arabian Sea", "avg_temp": 27.3}, {"region": "Bay of Bengal", "avg_temp": 28.1}],
    })


def make_response(status=200, body=None, json_error=False):
    r = Mock(spec=requests.Response)
    r.status_code = status
    r.ok = 200 <= status < 300
    if json_error:
        r.json.side_effect = ValueError("no json")
    else:
        r.json.return_value = body
    return r


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def respond():
    return make_response
