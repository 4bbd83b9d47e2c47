"""Smoke tests for the command-line tools."""
from __future__ import annotations

import csv
import sys
from pathlib import Path

import pytest

import dump_points
import inspect_las
from lassection.las_header import LasHeader
from lassection.record_writer import write_las


@pytest.fixture()
def two_tiles(tmp_path: Path):
    a = tmp_path / "a.las"
    b = tmp_path / "b.las"
    write_las(a, LasHeader(point_count=1, point_format=0, version=(1, 2)), [[1, 2, 3, 4, 0, 0, 0, 0, 0]])
    write_las(
        b,
        LasHeader(point_count=1, point_format=1, version=(1, 2)),
        [[5, 6, 7, 8, 0, 0, 0, 0, 0, 0.5]],
    )
    return a, b


class TestInspect:
    def test_layout(self, two_tiles) -> None:
        _, b = two_tiles
        text = inspect_las.format_layout(LasHeader.read_file(b))
        assert "'time'" in text
        assert "offset: 20" in text
        assert "record length: 28  stride: 28" in text

    def test_main(self, two_tiles, monkeypatch, capsys) -> None:
        a, b = two_tiles
        monkeypatch.setattr(sys, "argv", ["inspect_las.py", str(a), str(b)])
        inspect_las.main()
        out = capsys.readouterr().out
        assert out.count("Header Summary") == 2

    def test_nothing_readable(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setattr(sys, "argv", ["inspect_las.py", str(tmp_path / "none.las")])
        with pytest.raises(SystemExit):
            inspect_las.main()


class TestDumpPoints:
    def test_csv(self, two_tiles, tmp_path: Path, monkeypatch, capsys) -> None:
        a, b = two_tiles
        out = tmp_path / "points.csv"
        monkeypatch.setattr(
            sys, "argv", ["dump_points.py", str(a), str(b), "-c", "id,x,time", "-o", str(out)]
        )
        dump_points.main()
        with open(out, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows == [["id", "x", "time"], ["0", "1", ""], ["0", "5", "0.5"]]
        assert "[done] 2 rows" in capsys.readouterr().err

    def test_limit(self, two_tiles, monkeypatch, capsys) -> None:
        a, b = two_tiles
        monkeypatch.setattr(sys, "argv", ["dump_points.py", str(a), str(b), "--limit", "1"])
        dump_points.main()
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines == ["id,x,y,z,intensity", "0,1,2,3,4"]

    def test_schema(self, two_tiles, monkeypatch, capsys) -> None:
        a, b = two_tiles
        monkeypatch.setattr(sys, "argv", ["dump_points.py", str(a), str(b), "--schema"])
        dump_points.main()
        out = capsys.readouterr().out
        assert "id\tlong\trequired" in out
        assert "time\tdouble\tnullable" in out
