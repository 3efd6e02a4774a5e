"""Reporting utilities: export formats and file writers."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence

from .core import FmtErr, Rpt, XpErr


class OutErr(XpErr):
    """Raised when report cannot be written."""


Rndr = Callable[[Sequence[Rpt]], str]

_FMTS: dict[str, Rndr] = {}


def reg_fmt(nm: str) -> Callable[[Rndr], Rndr]:
    """Register an export format renderer.

    Args:
        nm: Format name (case-insensitive).

    Returns:
        Decorator that registers and returns the renderer.
    """

    def _w(fn: Rndr) -> Rndr:
        _FMTS[nm.lower().strip()] = fn
        return fn

    return _w


def fmts() -> list[str]:
    """Registered format names."""
    return sorted(_FMTS)


def render(fmt: str, rpts: Sequence[Rpt]) -> str:
    """Render reports in the given format.

    Raises:
        FmtErr: If format is not registered.
    """
    fn = _FMTS.get((fmt or "").lower().strip())
    if fn is None:
        raise FmtErr(f"unsupported format: {fmt!r}")
    return fn(rpts)


def _row(r: Rpt) -> dict[str, Any]:
    return {
        "pth": r.pth,
        "key": r.key,
        "val": r.val,
        "imp": r.imp,
        "m": ",".join(map(str, r.ids())),
    }


@reg_fmt("text")
def rn_text(rpts: Sequence[Rpt]) -> str:
    out: list[str] = []
    for r in rpts:
        out.append(f"{r.pth or r.key}: {r.val!r}")
        for f in r.flts:
            d = f.describe()
            out.append(f"  [{d.get('id')}] impact={d.get('impact')} {d.get('description', '')}".rstrip())
    return "\n".join(out) + ("\n" if out else "")


@reg_fmt("json")
def rn_json(rpts: Sequence[Rpt]) -> str:
    return json.dumps([r.asd() for r in rpts], ensure_ascii=False, default=str)


@reg_fmt("jsonl")
def rn_jsonl(rpts: Sequence[Rpt]) -> str:
    return "".join(json.dumps(r.asd(), ensure_ascii=False, default=str) + "\n" for r in rpts)


@reg_fmt("csv")
def rn_csv(rpts: Sequence[Rpt]) -> str:
    s = io.StringIO()
    w = csv.DictWriter(s, fieldnames=["pth", "key", "val", "imp", "m"])
    w.writeheader()
    w.writerows(_row(r) for r in rpts)
    return s.getvalue()


def wr_jsonl(p: Path, rows: Iterable[Mapping[str, Any]]) -> None:
    """Write rows as JSON Lines.

    Args:
        p: Output path.
        rows: Iterable of dict-like rows.

    Raises:
        OutErr: On write errors.
    """
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", encoding="utf-8") as f:
            for r in rows:
                f.write(json.dumps(dict(r), ensure_ascii=False, default=str) + "\n")
    except OSError as e:
        raise OutErr(f"cannot write: {p}") from e


def wr_csv(p: Path, rows: Iterable[Mapping[str, Any]], flds: Sequence[str] = ()) -> None:
    """Write rows as CSV.

    The file is always created; with no rows it holds only the header
    (empty when ``flds`` is not given).

    Args:
        p: Output path.
        rows: Iterable of dict-like rows.
        flds: Column names; taken from the first row when empty.

    Raises:
        OutErr: On write errors.
    """
    rows = list(rows)
    fn = list(flds) or (list(rows[0].keys()) if rows else [])
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", encoding="utf-8", newline="") as f:
            if not fn:
                return
            w = csv.DictWriter(f, fieldnames=fn)
            w.writeheader()
            w.writerows(rows)
    except OSError as e:
        raise OutErr(f"cannot write: {p}") from e
