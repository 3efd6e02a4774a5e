import pytest

from exposelite.core import CfgErr, Flt, FltSet, Rpt, RunRes


@pytest.mark.parametrize(
    "f,v,exp",
    [
        (Flt("a", "sub", 1, ("../",)), "/../../etc/passwd", True),
        (Flt("a", "sub", 1, ("../",)), "/ok", False),
        (Flt("b", "re", 1, (r"\bselect\b",)), "SELECT 1", True),
        (Flt("b", "re", 1, (r"\bselect\b",)), "hello", False),
        (Flt("d", "re", 1, (r"\d",)), 123, True),
        (Flt("d", "re", 1, (r"\d",)), None, False),
        (Flt("d", "re", 1, (r"\d",)), b"123", False),
    ],
)
def test_evaluate(f, v, exp):
    assert f.evaluate(v) is exp


def test_flt_bad_type():
    with pytest.raises(CfgErr):
        Flt("x", "zzz", 1, ("a",))


def test_flt_bad_regex():
    with pytest.raises(CfgErr):
        Flt("x", "re", 1, ("(",))


def test_flt_neg_impact():
    with pytest.raises(CfgErr):
        Flt("x", "re", -1, ("a",))


def test_describe():
    d = Flt("7", "re", 4, ("a", "b"), "desc", ("xss",)).describe()
    assert d == {"id": "7", "rule": "a|b", "description": "desc", "tags": ["xss"], "impact": 4}


def test_fltset_order_and_get():
    fs = FltSet([Flt("b", "sub", 1, ("x",)), Flt("a", "sub", 2, ("y",))])
    assert fs.ids() == ["b", "a"]
    assert len(fs) == 2
    assert fs.get("a").imp == 2
    assert fs.get("zz") is None


def test_fltset_rejects_non_filter():
    with pytest.raises(CfgErr):
        FltSet([object()])


def test_rpt_imp_and_asd():
    f1 = Flt("a", "sub", 3, ("x",))
    f2 = Flt("b", "sub", 4, ("x",))
    r = Rpt("q", "x", "GET.q")
    r.add(f1)
    r.add(f2)
    assert r.imp == 7
    assert r.ids() == ["a", "b"]
    d = r.asd()
    assert d["pth"] == "GET.q"
    assert [x["id"] for x in d["flts"]] == ["a", "b"]


def test_runres_ids():
    f = Flt("a", "sub", 3, ("x",))
    r = RunRes((Rpt("q", "x", "GET.q", [f]), Rpt("p", "x", "GET.p", [f])), 6)
    assert r.ids() == ["a", "a"]
