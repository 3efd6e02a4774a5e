"""HTTP API for exposelite.

Endpoints:
- health
- filters (list loaded filters)
- scan (inspect one data tree)
- batch (inspect several data trees)
- render (inspect and return the report in an export format)
- stats

Request data is already decoded: a JSON object like
{"GET": {...}, "POST": {...}, "COOKIE": {...}}.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from .core import CfgErr, FltSet, FmtErr, RunRes
from .mgr import Mgr
from .rep import render
from .rules import dfl_flts, ld_flts


class ScanIn(BaseModel):
    """Input schema for scan endpoints.

    Attributes:
        data: Nested request data.
        exc: Exception patterns for this scan.
        rst: Restriction paths for this scan.
    """

    data: dict[str, Any]
    exc: list[str] = Field(default_factory=list)
    rst: list[str] = Field(default_factory=list)


class RptOut(BaseModel):
    """One report entry."""

    pth: str
    key: str
    val: Any
    imp: int
    m: list[str]


class ScanOut(BaseModel):
    """Output schema for scan endpoints.

    Attributes:
        imp: Total impact.
        dig: Digest of the inspected data.
        rpts: Report entries.
    """

    imp: int
    dig: str
    rpts: list[RptOut]


class BatchIn(BaseModel):
    """Input schema for batch scan.

    Attributes:
        items: List of ScanIn objects.
    """

    items: list[ScanIn]


class BatchOut(BaseModel):
    """Output schema for batch scan.

    Attributes:
        items: List of ScanOut results.
        n: Total items.
    """

    items: list[ScanOut]
    n: int


class StatsOut(BaseModel):
    """Simple runtime stats.

    Attributes:
        up_s: Uptime seconds.
        scans: Total scans handled.
        hits: Scans with non-zero impact.
    """

    up_s: float
    scans: int
    hits: int


def _out(r: RunRes) -> ScanOut:
    return ScanOut(
        imp=r.imp,
        dig=r.dig,
        rpts=[
            RptOut(pth=x.pth, key=x.key, val=x.val, imp=x.imp, m=[str(i) for i in x.ids()])
            for x in r.rpts
        ],
    )


def mk_api(fp: Path | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        fp: Path to filters JSON; default filters when None.

    Returns:
        FastAPI app.

    Raises:
        CfgErr: If filters cannot be loaded.
    """
    flts: FltSet = ld_flts(fp) if fp is not None else dfl_flts()
    app = FastAPI(title="exposelite-api", version="0.1.0")
    t0 = time.time()
    st = {"scans": 0, "hits": 0}

    def _run(x: ScanIn) -> RunRes:
        m = Mgr(flts)
        try:
            m.set_exc(x.exc)
        except CfgErr as e:
            raise HTTPException(400, str(e)) from e
        m.set_rst(x.rst)
        r = m.run(x.data)
        st["scans"] += 1
        if r.imp > 0:
            st["hits"] += 1
        return r

    @app.get("/api/v1/health")
    def health() -> dict[str, Any]:
        """Healthcheck.

        Returns:
            Dict with ok flag.
        """
        return {"ok": True}

    @app.get("/api/v1/filters")
    def filters() -> list[dict[str, Any]]:
        """List loaded filters.

        Returns:
            Filter metadata in evaluation order.
        """
        return [f.describe() for f in flts]

    @app.post("/api/v1/scan", response_model=ScanOut)
    def scan(x: ScanIn) -> ScanOut:
        """Scan single data tree.

        Args:
            x: Scan input.

        Returns:
            ScanOut with impact and reports.

        Raises:
            HTTPException: If an exception pattern is invalid.
        """
        return _out(_run(x))

    @app.post("/api/v1/batch", response_model=BatchOut)
    def batch(x: BatchIn) -> BatchOut:
        """Scan several data trees.

        Args:
            x: Batch input.

        Returns:
            BatchOut with per-item results.

        Raises:
            HTTPException: If an exception pattern is invalid.
        """
        out = [_out(_run(it)) for it in x.items]
        return BatchOut(items=out, n=len(out))

    @app.post("/api/v1/render", response_class=PlainTextResponse)
    def rndr(x: ScanIn, fmt: str = "text") -> str:
        """Scan and render the report.

        Args:
            x: Scan input.
            fmt: Export format name.

        Returns:
            Rendered report text.

        Raises:
            HTTPException: If format is unsupported or a pattern is invalid.
        """
        r = _run(x)
        try:
            return render(fmt, r.rpts)
        except FmtErr as e:
            raise HTTPException(400, str(e)) from e

    @app.get("/api/v1/stats", response_model=StatsOut)
    def stats() -> StatsOut:
        """Get runtime stats.

        Returns:
            StatsOut.
        """
        return StatsOut(up_s=time.time() - t0, scans=int(st["scans"]), hits=int(st["hits"]))

    return app
