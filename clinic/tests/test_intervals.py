from datetime import datetime, timedelta

from clinic.services.intervals import overlaps

T0 = datetime(2030, 1, 1, 13, 0)


def h(n):
    return T0 + timedelta(hours=n)


def test_partial_overlap():
    assert overlaps(h(0), h(2), h(1), h(3))
    assert overlaps(h(1), h(3), h(0), h(2))


def test_containment_overlaps_both_ways():
    assert overlaps(h(0), h(4), h(1), h(2))
    assert overlaps(h(1), h(2), h(0), h(4))


def test_identical_windows_overlap():
    assert overlaps(h(0), h(2), h(0), h(2))


def test_touching_windows_do_not_overlap():
    assert not overlaps(h(0), h(2), h(2), h(4))
    assert not overlaps(h(2), h(4), h(0), h(2))


def test_disjoint_windows():
    assert not overlaps(h(0), h(1), h(3), h(4))


def test_symmetry():
    pairs = [((h(0), h(2)), (h(1), h(3))), ((h(0), h(1)), (h(1), h(2))), ((h(0), h(5)), (h(6), h(7)))]
    for a, b in pairs:
        assert overlaps(*a, *b) == overlaps(*b, *a)
