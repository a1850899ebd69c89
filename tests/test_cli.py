from __future__ import annotations

import pytest

from route_painter.directions_client import set_default_provider
from route_painter.main import EXIT_INVALID_INPUT, EXIT_OK, run


@pytest.fixture
def echo_default(echo_provider):
    set_default_provider(echo_provider)
    return echo_provider


def test_cli_generates_outputs(tmp_path, capsys, echo_default):
    html = tmp_path / "preview.html"
    code = run(
        [
            "--text", "2026",
            "--analog",
            "--lat", "25.0330",
            "--lng", "121.5654",
            "--distance", "5000",
            "--max-waypoints", "25",
            "--gpx", str(tmp_path / "gpx"),
            "--html", str(html),
            "--log-level", "WARNING",
        ]
    )
    out = capsys.readouterr().out
    assert code == EXIT_OK
    assert "Maps URL: https://www.google.com/maps/dir/?api=1" in out
    assert (tmp_path / "gpx" / "route_2026.gpx").exists()
    assert html.exists()
    assert echo_default.requests


def test_cli_shape_in_grid_mode(capsys, echo_default):
    code = run(
        ["--shape", "star", "--lat", "51.5", "--lng", "-0.12", "--grid", "--travel-mode", "bicycling"]
    )
    assert code == EXIT_OK
    assert all(r.travel_mode == "BICYCLING" for r in echo_default.requests)
    assert "Distance:" in capsys.readouterr().out


def test_cli_rejects_invalid_inputs(echo_default):
    assert run(["--shape", "heart", "--lat", "95", "--lng", "0"]) == EXIT_INVALID_INPUT
    assert run(["--shape", "heart", "--lat", "10", "--lng", "0", "--distance", "100"]) == EXIT_INVALID_INPUT
    assert run(["--text", "12a", "--analog", "--lat", "10", "--lng", "0"]) == EXIT_INVALID_INPUT
    assert echo_default.requests == []


def test_cli_requires_a_source():
    with pytest.raises(SystemExit):
        run(["--lat", "10", "--lng", "0"])
