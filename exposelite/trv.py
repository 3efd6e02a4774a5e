"""Data tree traversal.

Walks nested request data depth-first, keeps the current path, skips
exception paths and restricted leaves, and runs every filter on every
inspected leaf. An explicit stack is used so nesting depth is limited by
memory only.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Mapping

from .core import FltLike, Rpt
from .log import Lg, NopLg
from .pth import PthM, jn

logger = logging.getLogger(__name__)

_END = object()


@dataclass
class Ctx:
    """Per-run state: reports, impact and audit logger."""

    lg: Lg = field(default_factory=NopLg)
    rpts: list[Rpt] = field(default_factory=list)
    imp: int = 0


def is_box(v: Any) -> bool:
    """True for nested containers (mappings, lists, tuples)."""
    return isinstance(v, (Mapping, list, tuple))


def items(node: Any) -> Iterator[tuple[Any, Any]]:
    """Iterate (key, value) pairs; sequences are keyed by index."""
    if isinstance(node, Mapping):
        return iter(node.items())
    return iter(enumerate(node))


def info(lg: Lg, msg: str, c: Mapping[str, Any] | Callable[[], Mapping[str, Any]] | None = None) -> None:
    """Write an audit record; a failing sink or context builder never stops a run.

    Args:
        lg: Audit logger.
        msg: Message.
        c: Context mapping, or a callable producing it.
    """
    try:
        lg.info(msg, c() if callable(c) else c)
    except Exception as e:
        logger.warning("audit log failed for %r: %s", msg, e)


def chk(key: str, v: Any, pth: str, flts: Iterable[FltLike], ctx: Ctx) -> list[FltLike]:
    """Run all filters on a single leaf.

    Args:
        key: Leaf key.
        v: Leaf value.
        pth: Canonical path of the leaf.
        flts: Filters in evaluation order.
        ctx: Run state to update.

    Returns:
        Filters that matched, in evaluation order.
    """
    ms: list[FltLike] = []
    for f in flts:
        try:
            ok = bool(f.evaluate(v))
        except Exception as e:
            logger.warning("filter %r failed on %s: %s", getattr(f, "fid", f), pth, e)
            continue
        if not ok:
            continue
        info(ctx.lg, f"Match found on Filter ID {f.fid}", f.describe)
        ms.append(f)
        r = Rpt(key, v, pth)
        r.add(f)
        ctx.rpts.append(r)
        ctx.imp += int(f.imp)
    return ms


def trv(
    node: Any,
    pth: list[str],
    dp: int,
    flts: Iterable[FltLike],
    pm: PthM,
    ctx: Ctx,
) -> list[FltLike]:
    """Walk a data (sub)tree and run filters on its leaves.

    Args:
        node: Mapping or sequence to walk.
        pth: Path accumulated so far (not modified).
        dp: Nesting level of ``node`` (0 at root).
        flts: Filters in evaluation order.
        pm: Exception/restriction matcher.
        ctx: Run state; reports and impact are added here.

    Returns:
        Filters matched anywhere in the subtree, depth-first order.
    """
    flts = list(flts)
    ms: list[FltLike] = []
    cur = list(pth)
    stk: list[tuple[Iterator[tuple[Any, Any]], int]] = [(items(node), dp)]
    while stk:
        it, d = stk[-1]
        nx = next(it, _END)
        if nx is _END:
            stk.pop()
            continue
        k, v = nx
        del cur[d:]
        cur.append(str(k))
        p = jn(cur)

        if pm.is_exc(p):
            info(ctx.lg, f"Exception found on {p}", {"pth": p})
            continue

        if is_box(v):
            stk.append((items(v), d + 1))
            continue

        if not pm.is_rst(p):
            info(
                ctx.lg,
                f"Restrictions enabled, no match on path {p}",
                {"restrictions": pm.rst},
            )
            continue

        ms.extend(chk(str(k), v, p, flts, ctx))
    return ms


def dig(data: Any) -> str:
    """Digest of a data tree for audit correlation.

    Args:
        data: Data tree.

    Returns:
        md5 hex digest.
    """
    h = hashlib.md5(usedforsecurity=False)
    stk: list[Iterator[tuple[Any, Any]]] = [iter([("", data)])]
    while stk:
        nx = next(stk[-1], _END)
        if nx is _END:
            stk.pop()
            h.update(b")")
            continue
        k, v = nx
        h.update(repr(k).encode("utf-8", "replace"))
        if is_box(v):
            h.update(b"(")
            stk.append(items(v))
        else:
            h.update(b"=" + repr(v).encode("utf-8", "replace") + b";")
    return h.hexdigest()
