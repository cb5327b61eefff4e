"""Point-in-polygon containment for alert shapes."""

from __future__ import annotations

import numpy as np

from wxwarn.models import Point, Shape

_MIN_RING_POINTS = 4  # triangle plus closing point


def ring_area(ring: np.ndarray) -> float:
    """Signed shoelace area of a ring (negative for clockwise winding)."""
    xs = ring[:, 0]
    ys = ring[:, 1]
    return float(np.dot(xs, np.roll(ys, -1)) - np.dot(ys, np.roll(xs, -1))) / 2.0


def is_degenerate(ring: np.ndarray) -> bool:
    """True for rings that can never contain a point.

    Stored rings repeat their first vertex at the end, so a triangle plus its
    closing point is the smallest usable ring. Consecutive repeated vertices
    are dropped before counting.
    """
    if len(ring) < _MIN_RING_POINTS:
        return True
    moved = np.any(ring[1:] != ring[:-1], axis=1)
    if np.count_nonzero(moved) + 1 < _MIN_RING_POINTS:
        return True
    return ring_area(ring) == 0.0


def ring_contains(ring: np.ndarray, x: float, y: float) -> bool:
    """Even-odd crossing-number test of (x, y) against one ring.

    A horizontal ray is cast towards +x. An edge counts when y lies in the
    half-open span [min(y0, y1), max(y0, y1)) and x is strictly left of the
    edge at that height. Consequently points on a left or bottom edge are
    inside and points on a right or top edge are outside.

    The ring is treated as cyclic, so an explicit closing point is optional.
    """
    if is_degenerate(ring):
        return False

    xs = ring[:, 0]
    ys = ring[:, 1]
    prev_xs = np.roll(xs, 1)
    prev_ys = np.roll(ys, 1)

    spans = (ys > y) != (prev_ys > y)
    if not spans.any():
        return False

    x0, y0 = xs[spans], ys[spans]
    x1, y1 = prev_xs[spans], prev_ys[spans]
    x_at_y = x0 + (y - y0) * (x1 - x0) / (y1 - y0)
    crossings = int(np.count_nonzero(x < x_at_y))
    return crossings % 2 == 1


def in_bbox(bbox: tuple[float, float, float, float], x: float, y: float) -> bool:
    xmin, ymin, xmax, ymax = bbox
    return xmin <= x <= xmax and ymin <= y <= ymax


def contains(shape: Shape, point: Point) -> bool:
    """Return True when ``point`` lies inside ``shape``.

    Rings are combined with the even-odd rule: the point is inside when an
    odd number of rings contain it. Holes therefore cancel the outer ring
    around them and disjoint outer rings each contribute on their own.
    """
    x, y = point.x, point.y
    if not shape.rings or not in_bbox(shape.bbox, x, y):
        return False

    inside = False
    for ring in shape.rings:
        if ring_contains(ring, x, y):
            inside = not inside
    return inside
