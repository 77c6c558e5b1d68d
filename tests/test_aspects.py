import pytest

from astrocal.services import aspects


def test_table_priority_order():
    assert [a.name for a in aspects.ASPECTS] == [
        "Conjunction",
        "Opposition",
        "Trine",
        "Square",
        "Sextile",
        "Inconjunct",
    ]


@pytest.mark.parametrize(
    "angle,name",
    [(0.0, "Conjunction"), (180.0, "Opposition"), (90.0, "Square"), (120.0, "Trine"), (60.0, "Sextile"), (150.0, "Inconjunct")],
)
def test_classify_exact_angles(angle, name):
    match = aspects.classify(angle)
    assert match is not None
    assert match.name == name
    assert match.orb == 0.0


def test_classify_respects_per_aspect_orbs():
    assert aspects.classify(8.0).name == "Conjunction"
    assert aspects.classify(8.01) is None
    assert aspects.classify(97.0).name == "Square"
    assert aspects.classify(97.5) is None
    assert aspects.classify(153.0).name == "Inconjunct"
    assert aspects.classify(153.5) is None
    assert aspects.classify(45.0) is None


def test_classify_is_deterministic():
    assert aspects.classify(172.0) == aspects.classify(172.0)
    assert aspects.classify(172.0).orb == pytest.approx(8.0)


def test_find_aspects_square_between_points():
    found = aspects.find_aspects({"sun": 95.0, "mars": 185.0})
    assert found == [
        {"p1": "sun", "p2": "mars", "type": "Square", "symbol": "□", "orb": 0.0, "angle": 90.0}
    ]


def test_find_aspects_sorted_by_orb():
    found = aspects.find_aspects({"sun": 0.0, "moon": 125.0, "venus": 182.0})
    assert [a["type"] for a in found] == ["Opposition", "Sextile", "Trine"]
    assert [a["orb"] for a in found] == [2.0, 3.0, 5.0]


def test_canonical_aspect_accepts_aliases_and_case():
    assert aspects.canonical_aspect("quincunx") == "Inconjunct"
    assert aspects.canonical_aspect("trine") == "Trine"
    assert aspects.canonical_aspect("SQUARE") == "Square"


def test_aspect_colors_have_fallback():
    assert aspects.aspect_color("Opposition") == "#ef4444"
    assert aspects.aspect_color("Semi-square") == aspects.DEFAULT_COLOR
