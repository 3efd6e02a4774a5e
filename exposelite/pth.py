"""Data paths: exception and restriction matching.

Paths are leaf addresses like ``POST.user.bio``. Exceptions are regexes
matched against the whole path, with ``.`` always meaning a segment
separator. Restrictions are exact paths forming an allow-list.
"""

from __future__ import annotations

import re
from typing import Iterable

from .core import PatErr

SEP = "."


def jn(segs: Iterable[str]) -> str:
    """Join path segments into canonical path."""
    return SEP.join(segs)


def _esc_dots(p: str) -> str:
    # already escaped "\." is kept, bare "." becomes "\."
    out: list[str] = []
    i = 0
    while i < len(p):
        ch = p[i]
        if ch == "\\" and i + 1 < len(p):
            out.append(p[i : i + 2])
            i += 2
            continue
        out.append("\\." if ch == SEP else ch)
        i += 1
    return "".join(out)


def cmp_exc(p: str) -> re.Pattern[str]:
    """Compile an exception pattern.

    Args:
        p: Pattern text, e.g. "POST.id" or "GET.q[0-9]+".

    Returns:
        Compiled, fully anchored regex.

    Raises:
        PatErr: If pattern is not a string or not a valid regex.
    """
    if not isinstance(p, str):
        raise PatErr(f"exception pattern must be str: {p!r}")
    try:
        return re.compile("^" + _esc_dots(p) + "$")
    except re.error as e:
        raise PatErr(f"bad exception pattern {p!r}: {e}") from e


def _lst(p: str | Iterable[str]) -> list[str]:
    return [p] if isinstance(p, str) else list(p)


class PthM:
    """Path matcher holding exceptions and restrictions."""

    def __init__(self, exc: Iterable[str] = (), rst: Iterable[str] = ()) -> None:
        self._exc: list[tuple[str, re.Pattern[str]]] = []
        self._rst: list[str] = []
        self.add_exc(list(exc))
        self.add_rst(list(rst))

    def add_exc(self, p: str | Iterable[str]) -> None:
        """Add exception pattern(s).

        All patterns are compiled first, so a bad one leaves config untouched.

        Raises:
            PatErr: On invalid pattern.
        """
        ps = _lst(p)
        cs = [(x, cmp_exc(x)) for x in ps]
        self._exc.extend(cs)

    def add_rst(self, p: str | Iterable[str]) -> None:
        """Add restriction path(s)."""
        self._rst.extend(str(x) for x in _lst(p))

    @property
    def exc(self) -> list[str]:
        return [x for x, _ in self._exc]

    @property
    def rst(self) -> list[str]:
        return list(self._rst)

    def is_exc(self, pth: str) -> bool:
        """Check if path matches an exception (first match wins)."""
        for _, rx in self._exc:
            if rx.fullmatch(pth):
                return True
        return False

    def is_rst(self, pth: str) -> bool:
        """Check if path may be inspected.

        Returns:
            True if no restrictions are set or path is exactly one of them.
        """
        return not self._rst or pth in self._rst

    def snap(self) -> PthM:
        """Copy for one traversal, unaffected by later config changes."""
        m = PthM()
        m._exc = list(self._exc)
        m._rst = list(self._rst)
        return m
