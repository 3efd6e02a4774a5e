"""Inspection manager.

``Mgr`` owns the filters, exceptions, restrictions and logger, and runs the
traversal over request data::

    m = Mgr(dfl_flts())
    m.set_exc("POST.csrf_token")
    res = m.run({"GET": {"q": "1 UNION SELECT 1"}})
    res.imp, res.rpts

Each ``run`` starts from zero and returns its own ``RunRes``; nothing from a
run is shared with another one, so one instance can serve concurrent runs.
``get_rpts``/``get_imp`` show the latest finished run (last writer wins
when runs overlap). Use ``run_all`` to sum several data sets in one result.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Iterable, Mapping

from .cfg import Cfg, ld_cfg, lst
from .core import FltLike, FltSet, InpErr, Rpt, RunRes
from .log import Lg, NopLg
from .pth import PthM
from .rep import render
from .rules import ld_flts
from .trv import Ctx, dig, info, trv


def _chk_root(data: Any) -> None:
    if not isinstance(data, (Mapping, list, tuple)):
        raise InpErr(f"data must be a mapping, got {type(data).__name__}")


class Mgr:
    """Run filters over nested request data.

    Args:
        flts: Filters to run (FltSet or iterable of filters).
        lg: Audit logger; a no-op logger is used when None.
    """

    def __init__(self, flts: FltSet | Iterable[FltLike] | None = None, lg: Lg | None = None) -> None:
        self._lk = threading.Lock()
        self._pm = PthM()
        self._flts = FltSet()
        self._lg: Lg = NopLg()
        self._cfg: Cfg | None = None
        self._rpts: list[Rpt] = []
        self._imp = 0
        self.set_flts(flts if flts is not None else FltSet())
        if lg is not None:
            self.set_lg(lg)

    def _start(self) -> tuple[list[FltLike], PthM, Lg]:
        with self._lk:
            return list(self._flts), self._pm.snap(), self._lg

    def _done(self, res: RunRes) -> RunRes:
        with self._lk:
            self._rpts = list(res.rpts)
            self._imp = res.imp
        return res

    def run(self, data: Mapping[str, Any]) -> RunRes:
        """Run the filters against the given data.

        Args:
            data: Decoded request data, e.g. {"GET": {...}, "POST": {...}}.

        Returns:
            RunRes with reports and impact of this run only.

        Raises:
            InpErr: If data is not a mapping (or sequence).
        """
        _chk_root(data)
        fs, pm, lg = self._start()
        d = dig(data)
        info(lg, f"Executing on data {d}", {"dig": d})

        ctx = Ctx(lg=lg)
        trv(data, [], 0, fs, pm, ctx)
        return self._done(RunRes(tuple(ctx.rpts), ctx.imp, d))

    def run_all(self, datas: Iterable[Mapping[str, Any]]) -> RunRes:
        """Run over several data sets, accumulating into one result.

        Args:
            datas: Data trees.

        Returns:
            RunRes summed over all data sets; ``dig`` is the last digest.

        Raises:
            InpErr: If any data set is not a mapping (or sequence).
        """
        fs, pm, lg = self._start()
        ctx = Ctx(lg=lg)
        d = ""
        for data in datas:
            _chk_root(data)
            d = dig(data)
            info(lg, f"Executing on data {d}", {"dig": d})
            trv(data, [], 0, fs, pm, ctx)
        return self._done(RunRes(tuple(ctx.rpts), ctx.imp, d))

    def get_rpts(self) -> list[Rpt]:
        """Reports of the latest run."""
        with self._lk:
            return list(self._rpts)

    def get_imp(self) -> int:
        """Impact of the latest run."""
        with self._lk:
            return self._imp

    def set_imp(self, n: int) -> None:
        with self._lk:
            self._imp = int(n)

    def reset(self) -> None:
        """Forget the latest run's reports and impact."""
        with self._lk:
            self._rpts = []
            self._imp = 0

    def set_flts(self, flts: FltSet | Iterable[FltLike]) -> None:
        """Replace the filters with a private copy of ``flts``."""
        fs = FltSet(flts)
        with self._lk:
            self._flts = fs

    def get_flts(self) -> FltSet:
        return self._flts

    def set_exc(self, p: str | Iterable[str]) -> None:
        """Add exception pattern(s), e.g. "POST.csrf_token" or "GET.q[0-9]+".

        Raises:
            PatErr: If a pattern is not a valid regex; nothing is added then.
        """
        with self._lk:
            self._pm.add_exc(p)

    def get_exc(self) -> list[str]:
        return self._pm.exc

    def set_rst(self, p: str | Iterable[str]) -> None:
        """Add path(s) to restrict the checking to."""
        with self._lk:
            self._pm.add_rst(p)

    def get_rst(self) -> list[str]:
        return self._pm.rst

    def is_exc(self, pth: str) -> bool:
        return self._pm.is_exc(pth)

    def is_rst(self, pth: str) -> bool:
        return self._pm.is_rst(pth)

    def set_lg(self, lg: Lg) -> None:
        self._lg = lg

    def get_lg(self) -> Lg:
        return self._lg

    def set_cfg(self, src: Mapping[str, Any] | str | Path) -> None:
        """Set configuration and apply known settings.

        Known keys (top level or in an "expose" section): exceptions,
        restrictions, filters (path to a filter JSON file).

        Raises:
            CfgErr: If config cannot be loaded or a setting is invalid.
        """
        c = ld_cfg(src)
        exc = lst(c.get("exceptions", c.get("expose.exceptions")))
        rst = lst(c.get("restrictions", c.get("expose.restrictions")))
        fp = c.get("filters", c.get("expose.filters"))
        fs = ld_flts(fp) if fp else None

        self.set_exc(exc)
        self.set_rst(rst)
        if fs is not None:
            with self._lk:
                self._flts = FltSet([*self._flts, *fs])
        self._cfg = c

    def get_cfg(self) -> Cfg | None:
        return self._cfg

    def export(self, fmt: str = "text") -> str:
        """Render the latest reports.

        Raises:
            FmtErr: If format is not registered.
        """
        return render(fmt, self.get_rpts())
