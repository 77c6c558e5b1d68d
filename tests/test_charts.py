import asyncio
from datetime import datetime, timezone

import pytest

from astrocal.exceptions import (
    HouseCalculationError,
    IncompletePositions,
    InvalidCoordinatesError,
    InvalidDateTimeError,
    ProviderUnavailable,
)
from astrocal.schemas.charts import Chart
from astrocal.services import chart as chart_svc
from astrocal.services import ephem
from astrocal.services.constants import BODIES, ZodiacSign
from astrocal.services.houses import house_of
from fakes import ALL_BODIES_AT, EPOCH, FixedBackend, ready_client

NYC = (40.7128, -74.006)


def _natal(client, date="1990-06-15", time="12:00", tz=-4.0, **kwargs):
    return asyncio.run(chart_svc.calculate_natal_chart(date, time, *NYC, tz, client=client, **kwargs))


def test_natal_chart_new_york_sun_in_gemini():
    client = ready_client(ephem.MeanLongitudeBackend())
    chart = _natal(client)
    assert chart.sun.sign is ZodiacSign.GEMINI
    assert chart.is_valid
    assert chart.house_system == "Placidus"
    assert len(chart.houses) == 12
    assert chart.metadata.utc_datetime == datetime(1990, 6, 15, 16, 0, tzinfo=timezone.utc)


def test_natal_chart_new_york_swiss_ephemeris():
    pytest.importorskip("swisseph")
    client = ready_client(ephem.SwissEphemerisBackend(mode="moseph"))
    chart = _natal(client)
    assert chart.sun.sign is ZodiacSign.GEMINI
    assert 20.0 < chart.sun.degree_in_sign < 30.0
    assert chart.is_complete
    assert chart.house_system == "Placidus"
    again = _natal(client)
    skip = {"metadata": {"calculated_at"}}
    assert again.model_dump(exclude=skip) == chart.model_dump(exclude=skip)


def test_natal_chart_is_deterministic(fixed_client):
    a = _natal(fixed_client)
    b = _natal(fixed_client)
    skip = {"metadata": {"calculated_at"}}
    assert a.model_dump(exclude=skip) == b.model_dump(exclude=skip)


def test_every_body_gets_a_house(fixed_client):
    chart = _natal(fixed_client)
    for name, pos in chart.bodies().items():
        assert pos.house == house_of(pos.absolute_degree, chart.house_cusps)
        assert 1 <= pos.house <= 12
        assert 0.0 <= pos.degree_in_sign < 30.0
    assert list(chart.bodies()) == list(BODIES)
    assert chart.is_complete


def test_missing_minor_body_is_left_out():
    client = ready_client(FixedBackend(ALL_BODIES_AT, failing_bodies={"pluto"}))
    chart = _natal(client)
    assert chart.pluto is None
    assert "pluto" not in chart.bodies()
    assert chart.is_valid
    assert not chart.is_complete


def test_missing_moon_is_fatal():
    client = ready_client(FixedBackend(ALL_BODIES_AT, failing_bodies={"moon"}))
    with pytest.raises(IncompletePositions) as err:
        _natal(client)
    assert err.value.missing == ("moon",)


def test_unavailable_provider():
    client = ephem.EphemerisClient(
        backend=FixedBackend(ALL_BODIES_AT, fail_loads=10_000), timeout=0.01, poll_interval=0.001
    )
    with pytest.raises(ProviderUnavailable):
        _natal(client)
    with pytest.raises(ProviderUnavailable):
        chart_svc.calculate_chart(EPOCH, *NYC, client)


def test_house_failure_degrades_to_unknown_layout(fixed_client, monkeypatch):
    def broken(*_args):
        raise HouseCalculationError("no cusps")

    monkeypatch.setattr(chart_svc.houses_svc, "houses", broken)
    chart = _natal(fixed_client)
    assert chart.house_system == "Unknown"
    assert chart.houses == []
    assert chart.ascendant.absolute_degree == 0.0
    assert chart.midheaven.absolute_degree == 270.0
    assert all(pos.house is None for pos in chart.bodies().values())
    assert chart.sun.absolute_degree == 10.0


def test_polar_birth_uses_equal_houses(fixed_client):
    chart = asyncio.run(chart_svc.calculate_natal_chart("1990-06-15", "12:00", 70.0, 25.0, 3.0, client=fixed_client))
    assert chart.house_system == "Equal"


def test_local_time_converted_with_offset():
    assert chart_svc.local_to_utc(datetime(2024, 1, 1, 13, 20), 1.0) == datetime(2024, 1, 1, 12, 20, tzinfo=timezone.utc)
    # negative offsets can roll into the next day
    assert chart_svc.local_to_utc(datetime(2024, 1, 1, 22, 0), -5.0) == datetime(2024, 1, 2, 3, 0, tzinfo=timezone.utc)


def test_offset_estimated_from_longitude(fixed_client):
    chart = _natal(fixed_client, tz=None)
    assert chart.metadata.timezone_offset == -5.0
    assert chart.metadata.timezone_estimated
    assert chart.metadata.utc_datetime.hour == 17


def test_offset_from_lookup(fixed_client):
    chart = _natal(fixed_client, tz=None, tz_lookup=lambda lat, lon, local: -4.0)
    assert chart.metadata.timezone_offset == -4.0
    assert not chart.metadata.timezone_estimated


def test_failed_lookup_falls_back_to_estimate(fixed_client):
    def lookup(lat, lon, local):
        raise ConnectionError("timezone service down")

    chart = _natal(fixed_client, tz=None, tz_lookup=lookup)
    assert chart.metadata.timezone_offset == -5.0
    assert chart.metadata.timezone_estimated


def test_offset_from_zone_name_observes_dst(fixed_client):
    summer = _natal(fixed_client, tz=None, timezone_name="America/New_York")
    winter = _natal(fixed_client, date="1990-01-15", tz=None, timezone_name="America/New_York")
    assert summer.metadata.timezone_offset == -4.0
    assert winter.metadata.timezone_offset == -5.0


def test_unknown_zone_name(fixed_client):
    with pytest.raises(InvalidDateTimeError):
        _natal(fixed_client, tz=None, timezone_name="Mars/Olympus_Mons")


@pytest.mark.parametrize("lat,lon", [(90.5, 0.0), (-91.0, 0.0), (0.0, 180.01), (0.0, -200.0)])
def test_invalid_coordinates(fixed_client, lat, lon):
    with pytest.raises(InvalidCoordinatesError):
        asyncio.run(chart_svc.calculate_natal_chart("1990-06-15", "12:00", lat, lon, 0.0, client=fixed_client))


@pytest.mark.parametrize("date,time", [("1990-13-01", "12:00"), ("1990-06-15", "25:00"), ("yesterday", "noon")])
def test_invalid_date_or_time(fixed_client, date, time):
    with pytest.raises(InvalidDateTimeError):
        _natal(fixed_client, date=date, time=time)


def test_current_chart(fixed_client):
    chart = asyncio.run(chart_svc.calculate_current_chart(*NYC, EPOCH, client=fixed_client))
    assert chart.metadata.kind == "current"
    assert chart.metadata.utc_datetime == EPOCH
    assert chart.metadata.date is None
    assert chart.moon.absolute_degree == 50.0


def test_chart_json_round_trip(fixed_client):
    chart = _natal(fixed_client)
    assert Chart.model_validate_json(chart.model_dump_json()) == chart
