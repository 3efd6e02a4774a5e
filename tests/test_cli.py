import json
from pathlib import Path

import pytest

from exposelite.cli import run_cli


def _rows(p: Path):
    return [json.loads(x) for x in p.read_text(encoding="utf-8").splitlines()]


def test_cli_jsonl(tmp_path: Path):
    ip = tmp_path / "in.jsonl"
    ip.write_text(
        '{"GET": {"q": "1 UNION SELECT 1"}}\n\n{"POST": {"name": "bob"}}\n',
        encoding="utf-8",
    )
    op = tmp_path / "out.jsonl"
    assert run_cli(["--in", str(ip), "--out", str(op)]) == 0
    rows = _rows(op)
    assert [r["n"] for r in rows] == [0, 1]
    assert rows[0]["imp"] > 0 and "2" in rows[0]["m"].split(",")
    assert rows[1]["imp"] == 0


def test_cli_single_json_exc_rst(tmp_path: Path):
    fp = tmp_path / "f.json"
    fp.write_text(json.dumps([{"id": "d", "rule": "\\d", "impact": 5}]), encoding="utf-8")
    ip = tmp_path / "in.json"
    ip.write_text(json.dumps({"POST": {"id": "1", "n": "2", "m": "3"}}, indent=2), encoding="utf-8")
    op = tmp_path / "out.jsonl"
    run_cli(["--in", str(ip), "--out", str(op), "--flt", str(fp), "--exc", "POST.id", "--rst", "POST.id", "--rst", "POST.n"])
    rows = _rows(op)
    assert rows == [{"n": 0, "imp": 5, "m": "d", "pths": "POST.n"}]


def test_cli_csv(tmp_path: Path):
    ip = tmp_path / "in.json"
    ip.write_text('{"a": "../../etc/passwd"}', encoding="utf-8")
    op = tmp_path / "out.csv"
    run_cli(["--in", str(ip), "--out", str(op), "--ofmt", "csv"])
    assert op.read_text(encoding="utf-8").splitlines()[0] == "n,imp,m,pths"


def test_cli_bad_input(tmp_path: Path):
    ip = tmp_path / "in.jsonl"
    ip.write_text('{"a": 1}\n{oops\n', encoding="utf-8")
    with pytest.raises(SystemExit):
        run_cli(["--in", str(ip), "--out", str(tmp_path / "o.jsonl")])


def test_cli_bad_pattern(tmp_path: Path):
    ip = tmp_path / "in.json"
    ip.write_text('{"a": 1}', encoding="utf-8")
    with pytest.raises(SystemExit):
        run_cli(["--in", str(ip), "--out", str(tmp_path / "o.jsonl"), "--exc", "a.("])


def test_cli_empty_input_csv(tmp_path: Path):
    ip = tmp_path / "in.jsonl"
    ip.write_text("", encoding="utf-8")
    op = tmp_path / "out.csv"
    assert run_cli(["--in", str(ip), "--out", str(op), "--ofmt", "csv"]) == 0
    assert op.read_text(encoding="utf-8").splitlines() == ["n,imp,m,pths"]
