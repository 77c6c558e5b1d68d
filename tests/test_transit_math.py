from astrocal.services.transit_math import aspect_orb, is_applying


def test_aspect_orb_measures_distance_from_exact():
    # 190° apart against a 180° aspect is 10° shy of exact on the short arc
    assert aspect_orb(200.0, 10.0, 180.0) == 10.0
    assert aspect_orb(185.0, 95.0, 90.0) == 0.0


def test_direct_motion_applying_and_separating():
    # Transit is 2° behind exact conjunction and moving forward -> applying.
    assert is_applying(28.0, 28.5, 30.0, 0.0)
    # Transit is 2° ahead of exact conjunction and still moving forward -> separating.
    assert not is_applying(32.0, 32.5, 30.0, 0.0)


def test_retrograde_motion_reverses_application():
    # Past the opposition but moving retrograde back towards exact -> applying.
    assert is_applying(182.5, 182.0, 0.0, 180.0)
    # Approaching from the other side while retrograde -> separating.
    assert not is_applying(177.5, 177.0, 0.0, 180.0)


def test_stationary_body_is_not_applying():
    assert not is_applying(62.0, 62.0, 0.0, 60.0)


def test_crossing_aries_point():
    # natal at 1°, transit at 358° moving forward: conjunction tightening
    assert is_applying(358.0, 358.4, 1.0, 0.0)
