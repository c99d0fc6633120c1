import json

import pytest

import setplan.__main__ as cli
from setplan import load_project
from setplan.geometry import has_overlaps


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "_configure_logging", lambda level: None)


def _write_project(path, sets, *, pixels_per_unit=1.0, rules=()):
    data = {
        "version": 1,
        "pixelsPerUnit": pixels_per_unit,
        "unit": "ft",
        "sets": sets,
        "nextSetId": len(sets) + 1,
        "rules": list(rules),
        "nextRuleId": len(rules) + 1,
    }
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _coincident(tmp_path):
    return _write_project(
        tmp_path / "plan.json",
        [
            {"id": 1, "name": "Bed", "x": 0, "y": 0, "width": 10, "height": 10},
            {"id": 2, "name": "Desk", "x": 0, "y": 0, "width": 10, "height": 10},
        ],
    )


def test_score_only_reports_overlap(tmp_path, capsys):
    cli.main([str(_coincident(tmp_path)), "--score-only"])

    out = capsys.readouterr().out
    assert "Score: 1000.000" in out
    assert "Final score" not in out
    assert "1 Bed: (0.0, 0.0)" in out


def test_layout_writes_separated_project(tmp_path, capsys):
    output = tmp_path / "out" / "arranged.json"

    cli.main([str(_coincident(tmp_path)), "--seed", "1", "--output", str(output)])

    out = capsys.readouterr().out
    assert "Accepted moves:" in out
    assert "Final score: 0.000" in out
    arranged = load_project(output)
    assert not has_overlaps(arranged.sets, arranged.pixels_per_unit)


def test_alternate_uses_150_iterations(tmp_path, capsys):
    cli.main([str(_coincident(tmp_path)), "--seed", "3", "--alternate"])

    assert "/150" in capsys.readouterr().out


def test_cut_is_applied_before_output(tmp_path, capsys):
    path = _write_project(
        tmp_path / "plan.json",
        [
            {"id": 1, "name": "Column", "x": 100, "y": 100, "width": 4, "height": 4},
            {"id": 2, "name": "Room", "x": 120, "y": 120, "width": 10, "height": 10},
        ],
        pixels_per_unit=10.0,
    )
    output = tmp_path / "cut.json"

    cli.main([str(path), "--cut", "1,2", "--score-only", "--output", str(output)])

    assert "[1 cut(s), area 96.00]" in capsys.readouterr().out
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["sets"][1]["cutouts"] == [{"x": 0.0, "y": 0.0, "w": 2.0, "h": 2.0}]
    assert "cutouts" not in data["sets"][0]


def test_missing_file_exits_with_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(tmp_path / "missing.json")])

    assert excinfo.value.code == 1


def test_unknown_cut_target_exits_with_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(_coincident(tmp_path)), "--cut", "1,99"])

    assert excinfo.value.code == 1


def test_malformed_cut_argument_is_rejected(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(_coincident(tmp_path)), "--cut", "1"])

    assert excinfo.value.code == 2
