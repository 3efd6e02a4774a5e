"""CLI for exposelite."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Iterator

from .core import InpErr, XpErr
from .mgr import Mgr
from .rep import wr_csv, wr_jsonl
from .rules import dfl_flts, ld_flts

_COLS = ("n", "imp", "m", "pths")


def _ap() -> argparse.ArgumentParser:
    """Build argparse parser."""
    p = argparse.ArgumentParser(prog="exposelite", add_help=True)
    p.add_argument("--in", dest="inp", required=True, help="input JSON or JSON Lines file")
    p.add_argument("--out", dest="outp", required=True, help="output file path")
    p.add_argument("--ofmt", dest="ofmt", default="jsonl", choices=["jsonl", "csv"])
    p.add_argument("--flt", dest="flt", default="", help="filters JSON path (optional)")
    p.add_argument("--cfg", dest="cfg", default="", help="config INI/JSON path (optional)")
    p.add_argument("--exc", dest="exc", action="append", default=[], help="exception pattern")
    p.add_argument("--rst", dest="rst", action="append", default=[], help="restriction path")
    return p


def rd_data(p: Path) -> Iterator[Any]:
    """Read data trees from a JSON document or JSON Lines file.

    Args:
        p: Path to input file.

    Yields:
        Decoded data trees.

    Raises:
        InpErr: If file cannot be read or is not JSON.
    """
    try:
        txt = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InpErr("file must be UTF-8") from e
    except OSError as e:
        raise InpErr(f"cannot read: {p}") from e
    try:
        yield json.loads(txt)
        return
    except json.JSONDecodeError:
        pass
    for i, ln in enumerate(txt.splitlines(), 1):
        if not ln.strip():
            continue
        try:
            yield json.loads(ln)
        except json.JSONDecodeError as e:
            raise InpErr(f"bad json on line {i}") from e


def run_cli(argv: list[str] | None = None) -> int:
    """Run CLI.

    Args:
        argv: Arguments list without program name.

    Returns:
        Exit code (0 ok).
    """
    a = _ap().parse_args(argv)
    ip = Path(a.inp)
    op = Path(a.outp)

    rows: list[dict[str, Any]] = []
    try:
        m = Mgr(ld_flts(Path(a.flt)) if str(a.flt).strip() else dfl_flts())
        if str(a.cfg).strip():
            m.set_cfg(Path(a.cfg))
        m.set_exc(a.exc)
        m.set_rst(a.rst)

        for n, d in enumerate(rd_data(ip)):
            r = m.run(d)
            rows.append(
                {
                    "n": n,
                    "imp": r.imp,
                    "m": ",".join(map(str, r.ids())),
                    "pths": ",".join(x.pth for x in r.rpts),
                }
            )
    except XpErr as e:
        raise SystemExit(f"err: {e}") from e

    if a.ofmt == "jsonl":
        wr_jsonl(op, rows)
    else:
        wr_csv(op, rows, _COLS)
    return 0
