"""Filter catalog loader."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from .core import CfgErr, Flt, FltSet


def dfl_flts() -> FltSet:
    """Default filter set.

    Returns:
        FltSet with simple patterns for common web attacks.
    """
    return FltSet(
        [
            Flt("1", "re", 5, (r"(\%27)|(\')|(\-\-)|(\%23)|(#)",), "SQL comment or quote", ("sqli",)),
            Flt(
                "2",
                "re",
                6,
                (r"\b(UNION|SELECT|INSERT|UPDATE|DELETE|DROP)\b",),
                "SQL keywords",
                ("sqli",),
            ),
            Flt(
                "3",
                "re",
                5,
                (r"<\s*script\b", r"onerror\s*=", r"onload\s*="),
                "Script tags and event handlers",
                ("xss", "csrf"),
            ),
            Flt("4", "sub", 4, ("../", "..\\", "%2e%2e%2f", "%2e%2e%5c"), "Directory traversal", ("dt", "lfi")),
            Flt(
                "5",
                "re",
                6,
                (r"[;&|`]\s*(bash|sh|cmd|powershell)\b", r"\b(wget|curl)\b\s+https?://"),
                "Command injection",
                ("rce",),
            ),
        ]
    )


def _tags(v: Any) -> tuple[str, ...]:
    # original catalogs use {"tag": [...]} or "a|b"
    if isinstance(v, Mapping):
        v = v.get("tag", [])
    if isinstance(v, str):
        return tuple(x for x in v.split("|") if x)
    return tuple(map(str, v or ()))


def mk_flt(x: Mapping[str, Any]) -> Flt:
    """Make filter from dict.

    Accepts the long keys (id, rule, description, tags, impact) and the
    short ones (rid, rtp, w, ps).

    Raises:
        CfgErr: If fields are missing or invalid.
    """
    if not isinstance(x, Mapping):
        raise CfgErr("filter items must be objects")
    try:
        if "rule" in x:
            return Flt(
                fid=str(x["id"]),
                rtp="re",
                imp=int(x["impact"]),
                ps=(str(x["rule"]),),
                desc=str(x.get("description", "")),
                tags=_tags(x.get("tags")),
            )
        return Flt(
            fid=str(x["rid"]),
            rtp=str(x["rtp"]),
            imp=int(x["w"]),
            ps=tuple(map(str, x.get("ps", ()))),
            desc=str(x.get("desc", "")),
            tags=_tags(x.get("tags")),
        )
    except KeyError as e:
        raise CfgErr(f"missing field: {e}") from e
    except (TypeError, ValueError) as e:
        raise CfgErr(f"bad filter {x!r}: {e}") from e


def ld_flts(src: str | Path | Iterable[Mapping[str, Any]] | Mapping[str, Any]) -> FltSet:
    """Load filters.

    Args:
        src: Path to JSON file, a list of filter dicts, or an object with a
            "filters" list (optionally wrapped as {"filters": {"filter": [...]}}).

    Returns:
        FltSet in file order.

    Raises:
        CfgErr: If file cannot be loaded or filters are malformed.
    """
    if isinstance(src, (str, Path)):
        p = Path(src)
        try:
            src = json.loads(p.read_text(encoding="utf-8"))
        except OSError as e:
            raise CfgErr(f"cannot read filters: {p}") from e
        except json.JSONDecodeError as e:
            raise CfgErr("filters must be JSON") from e
    if isinstance(src, Mapping):
        src = src.get("filters", [])
        if isinstance(src, Mapping):
            src = src.get("filter", [])
    if not isinstance(src, (list, tuple)):
        raise CfgErr("filters must be a list")
    return FltSet(mk_flt(x) for x in src)
