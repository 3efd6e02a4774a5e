from pathlib import Path

import pytest

from exposelite.cfg import Cfg, ld_cfg, lst
from exposelite.core import CfgErr


def test_mapping():
    c = ld_cfg({"a": 1, "sec": {"b": "x"}})
    assert c.get("a") == 1
    assert c["sec.b"] == "x"
    assert "sec.b" in c
    assert c.get("nope", 3) == 3


def test_ini(tmp_path: Path):
    p = tmp_path / "c.ini"
    p.write_text("top = 1\n[expose]\nexceptions = POST.a, POST.b\n", encoding="utf-8")
    c = ld_cfg(p)
    assert c.get("top") == "1"
    assert lst(c.get("expose.exceptions")) == ["POST.a", "POST.b"]


def test_json(tmp_path: Path):
    p = tmp_path / "c.json"
    p.write_text('{"restrictions": ["GET.q"]}', encoding="utf-8")
    assert ld_cfg(str(p)).get("restrictions") == ["GET.q"]


def test_bad_ini(tmp_path: Path):
    p = tmp_path / "c.ini"
    p.write_text("[expose\nx", encoding="utf-8")
    with pytest.raises(CfgErr):
        ld_cfg(p)


def test_bad_json_root(tmp_path: Path):
    p = tmp_path / "c.json"
    p.write_text("[1]", encoding="utf-8")
    with pytest.raises(CfgErr):
        ld_cfg(p)


def test_missing(tmp_path: Path):
    with pytest.raises(CfgErr):
        ld_cfg(tmp_path / "x.ini")


def test_bad_source():
    with pytest.raises(CfgErr):
        ld_cfg(5)


@pytest.mark.parametrize("v,exp", [(None, []), ("a, b,,c", ["a", "b", "c"]), (["a", 1], ["a", "1"])])
def test_lst(v, exp):
    assert lst(v) == exp


def test_lst_bad():
    with pytest.raises(CfgErr):
        lst(5)


def test_asd_is_copy():
    c = Cfg({"a": 1})
    c.asd()["a"] = 2
    assert c["a"] == 1


@pytest.mark.parametrize(
    "v,exp",
    [
        ("GET.q[0-9]{1,3}", ["GET.q[0-9]{1,3}"]),
        ("POST.(a|b),GET.x", ["POST.(a|b)", "GET.x"]),
        ("a\\,b, c", ["a\\,b", "c"]),
        ("\nPOST.a\nPOST.b[,]\n", ["POST.a", "POST.b[,]"]),
    ],
)
def test_lst_keeps_regex_items(v, exp):
    assert lst(v) == exp
