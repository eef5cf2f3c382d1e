def overlaps(start_a, end_a, start_b, end_b) -> bool:
    """Return True if the half-open intervals ``[start_a, end_a)`` and
    ``[start_b, end_b)`` share at least one instant.

    Intervals that merely touch (one ends exactly when the other starts)
    do not overlap.
    """
    return start_a < end_b and end_a > start_b
