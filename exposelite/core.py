"""Core types: errors, filters, filter set and match reports.

A filter is anything that looks like :class:`FltLike`. The engine never
looks inside a filter, it only calls ``evaluate`` and reads ``fid``/``imp``.
:class:`Flt` is the built-in regex/substring implementation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Protocol, runtime_checkable


class XpErr(Exception):
    """Base exception for exposelite."""


class CfgErr(XpErr):
    """Raised when config/filters are invalid."""


class PatErr(CfgErr):
    """Raised when an exception pattern cannot be compiled."""


class InpErr(XpErr):
    """Raised when input data cannot be inspected."""


class FmtErr(XpErr):
    """Raised when an export format is not registered."""


@runtime_checkable
class FltLike(Protocol):
    """Filter contract consumed by the engine."""

    fid: Any
    imp: int

    def evaluate(self, v: Any) -> bool: ...

    def describe(self) -> dict[str, Any]: ...


_RTPS = ("re", "sub")


@dataclass(frozen=True)
class Flt:
    """Single detection filter.

    Args:
        fid: Filter identifier.
        rtp: Filter type: "re" (regexes) or "sub" (substrings).
        imp: Impact weight added to the score on a match.
        ps: Patterns (regexes or substrings depending on type).
        desc: Human readable description.
        tags: Free-form tags, e.g. ("xss", "csrf").

    Raises:
        CfgErr: On unknown type, negative impact or bad regex.
    """

    fid: str
    rtp: str
    imp: int
    ps: tuple[str, ...]
    desc: str = ""
    tags: tuple[str, ...] = ()
    _rx: tuple[re.Pattern[str], ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.rtp not in _RTPS:
            raise CfgErr(f"bad rtp: {self.rtp!r} for {self.fid!r}")
        if int(self.imp) < 0:
            raise CfgErr(f"negative impact for {self.fid!r}")
        if self.rtp == "re":
            try:
                rx = tuple(re.compile(p, re.IGNORECASE) for p in self.ps)
            except re.error as e:
                raise CfgErr(f"bad regex in {self.fid!r}: {e}") from e
            object.__setattr__(self, "_rx", rx)

    def evaluate(self, v: Any) -> bool:
        """Check if filter matches a leaf value.

        Args:
            v: Scalar leaf value.

        Returns:
            True if matched. None and non-scalar values never match.
        """
        if v is None or not isinstance(v, (str, int, float, bool)):
            return False
        s = str(v)
        if self.rtp == "sub":
            ls = s.lower()
            return any(p.lower() in ls for p in self.ps)
        return any(r.search(s) for r in self._rx)

    def describe(self) -> dict[str, Any]:
        """Filter metadata for logs and exports."""
        return {
            "id": self.fid,
            "rule": list(self.ps) if self.rtp == "sub" else "|".join(self.ps),
            "description": self.desc,
            "tags": list(self.tags),
            "impact": int(self.imp),
        }


class FltSet:
    """Ordered collection of filters.

    Iteration order is insertion order, which is the evaluation order.
    """

    def __init__(self, flts: Iterable[FltLike] = ()) -> None:
        self._fs: list[FltLike] = []
        for f in flts:
            self.add(f)

    def add(self, f: FltLike) -> None:
        """Append a filter.

        Raises:
            CfgErr: If object does not implement the filter contract.
        """
        if not isinstance(f, FltLike):
            raise CfgErr(f"not a filter: {f!r}")
        self._fs.append(f)

    def ext(self, fs: Iterable[FltLike]) -> None:
        """Append several filters in order.

        Raises:
            CfgErr: If any object does not implement the filter contract.
        """
        for f in fs:
            self.add(f)

    def get(self, fid: Any) -> FltLike | None:
        """Find filter by id.

        Returns:
            First filter with that id, or None.
        """
        for f in self._fs:
            if f.fid == fid:
                return f
        return None

    def ids(self) -> list[Any]:
        """Filter ids in evaluation order."""
        return [f.fid for f in self._fs]

    def __iter__(self) -> Iterator[FltLike]:
        return iter(list(self._fs))

    def __len__(self) -> int:
        return len(self._fs)


@dataclass
class Rpt:
    """Match report entry for one leaf value.

    Args:
        key: Leaf key (last path segment).
        val: Leaf value.
        pth: Canonical dotted path of the leaf.
        flts: Filters matched, in match order.
    """

    key: str
    val: Any
    pth: str = ""
    flts: list[FltLike] = field(default_factory=list)

    def add(self, f: FltLike) -> None:
        """Record a matched filter."""
        self.flts.append(f)

    def ids(self) -> list[Any]:
        """Matched filter ids in match order."""
        return [f.fid for f in self.flts]

    @property
    def imp(self) -> int:
        return sum(int(f.imp) for f in self.flts)

    def asd(self) -> dict[str, Any]:
        """Convert to dict."""
        return {
            "key": self.key,
            "val": self.val,
            "pth": self.pth,
            "imp": self.imp,
            "flts": [f.describe() for f in self.flts],
        }


@dataclass(frozen=True)
class RunRes:
    """Result of one inspection run.

    Args:
        rpts: Report entries in traversal order.
        imp: Total impact (sum over all matched filters).
        dig: Digest of the inspected data.
    """

    rpts: tuple[Rpt, ...] = ()
    imp: int = 0
    dig: str = ""

    def ids(self) -> list[Any]:
        """Matched filter ids in match order."""
        return [i for r in self.rpts for i in r.ids()]
