"""Configuration loading.

Config comes either as a mapping or as a file: ``.ini``/``.cfg`` read with
configparser (sections become ``section.key``) or ``.json``.
"""

from __future__ import annotations

import configparser
import json
from pathlib import Path
from typing import Any, Iterator, Mapping

from .core import CfgErr


class Cfg:
    """Read-only settings.

    Args:
        d: Flat or nested settings mapping.
    """

    def __init__(self, d: Mapping[str, Any] | None = None) -> None:
        self._d: dict[str, Any] = {}
        for k, v in (d or {}).items():
            if isinstance(v, Mapping):
                for k2, v2 in v.items():
                    self._d[f"{k}.{k2}"] = v2
            else:
                self._d[str(k)] = v

    def get(self, k: str, dflt: Any = None) -> Any:
        return self._d.get(k, dflt)

    def __getitem__(self, k: str) -> Any:
        return self._d[k]

    def __contains__(self, k: object) -> bool:
        return k in self._d

    def __iter__(self) -> Iterator[str]:
        return iter(self._d)

    def asd(self) -> dict[str, Any]:
        """Convert to dict."""
        return dict(self._d)


def _ld_ini(p: Path) -> dict[str, Any]:
    cp = configparser.ConfigParser(interpolation=None)
    try:
        with p.open("r", encoding="utf-8") as f:
            txt = f.read()
        # keys before the first section header are allowed
        cp.read_string("[__top__]\n" + txt, source=str(p))
    except OSError as e:
        raise CfgErr(f"cannot read cfg: {p}") from e
    except configparser.Error as e:
        raise CfgErr(f"bad ini cfg: {p}: {e}") from e
    d: dict[str, Any] = {}
    for s in cp.sections():
        sec = dict(cp.items(s))
        if s == "__top__":
            d.update(sec)
        else:
            d[s] = sec
    return d


def _ld_json(p: Path) -> dict[str, Any]:
    try:
        d = json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise CfgErr(f"cannot read cfg: {p}") from e
    except json.JSONDecodeError as e:
        raise CfgErr("cfg must be JSON") from e
    if not isinstance(d, dict):
        raise CfgErr("cfg root must be object")
    return d


def ld_cfg(src: Mapping[str, Any] | str | Path) -> Cfg:
    """Load config.

    Args:
        src: Settings mapping or path to an INI/JSON file.

    Returns:
        Cfg object.

    Raises:
        CfgErr: If file does not exist or cannot be parsed.
    """
    if isinstance(src, Mapping):
        return Cfg(src)
    if not isinstance(src, (str, Path)):
        raise CfgErr(f"bad cfg source: {src!r}")
    p = Path(src)
    if not p.is_file():
        raise CfgErr(f"Could not load configuration file {p}")
    if p.suffix.lower() == ".json":
        return Cfg(_ld_json(p))
    return Cfg(_ld_ini(p))


def _split(s: str) -> list[str]:
    # commas inside (), [], {} or after a backslash belong to the item
    out: list[str] = []
    cur: list[str] = []
    dp = 0
    i = 0
    while i < len(s):
        ch = s[i]
        if ch == "\\" and i + 1 < len(s):
            cur.append(s[i : i + 2])
            i += 2
            continue
        if ch in "([{":
            dp += 1
        elif ch in ")]}" and dp > 0:
            dp -= 1
        if ch == "\n" or (ch == "," and dp == 0):
            out.append("".join(cur))
            cur = []
        else:
            cur.append(ch)
        i += 1
    out.append("".join(cur))
    return [x.strip() for x in out if x.strip()]


def lst(v: Any) -> list[str]:
    """Config value as list of strings.

    Strings are split on newlines and on commas outside brackets, so regex
    items like "GET.q[0-9]{1,3}" stay whole.

    Raises:
        CfgErr: If value is neither a string nor a list.
    """
    if v is None:
        return []
    if isinstance(v, str):
        return _split(v)
    if isinstance(v, (list, tuple)):
        return [str(x) for x in v]
    raise CfgErr(f"expected list or string: {v!r}")
