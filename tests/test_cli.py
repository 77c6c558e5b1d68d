import json

import pytest

from astrocal import cli
from astrocal.services import ephem
from fakes import ALL_BODIES_AT, FixedBackend


@pytest.fixture(autouse=True)
def _fixed_ephemeris(monkeypatch, fixed_client):
    monkeypatch.setattr(ephem, "_DEFAULT_CLIENT", fixed_client)


def test_natal_text(capsys):
    assert cli.main(["natal", "1990-06-15", "12:00", "40.7128", "-74.006", "--tz", "-4"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Birth Chart")
    assert "☉ Sun      10.00° Aries" in out
    assert "Houses (Placidus):" in out
    assert "Timezone: UTC-4" in out


def test_natal_json(capsys):
    assert cli.main(["--json", "natal", "1990-06-15", "12:00", "40.7128", "-74.006"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["metadata"]["timezone_estimated"] is True
    assert data["moon"]["sign"] == "Taurus"


def test_transits_limit(capsys):
    argv = ["--json", "transits", "2024-03-15", "1990-06-15", "12:00", "40.7128", "-74.006", "--tz", "-4", "--limit", "2"]
    assert cli.main(argv) == 0
    events = json.loads(capsys.readouterr().out)
    assert len(events) == 2
    assert events[0]["score"] >= events[1]["score"]


def test_engine_errors_exit_nonzero(monkeypatch, capsys):
    client = ephem.EphemerisClient(backend=FixedBackend(ALL_BODIES_AT, failing_bodies={"sun"}))
    monkeypatch.setattr(ephem, "_DEFAULT_CLIENT", client)
    assert cli.main(["natal", "1990-06-15", "12:00", "0", "0", "--tz", "0"]) == 1
    assert "Failed to calculate planetary positions: sun" in capsys.readouterr().err
