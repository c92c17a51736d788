"""Leaf-node geometry helpers for canvas boxes. No engine imports.

Boxes are (x, y, width, height) in canvas units with y growing downward,
matching the drawing surface the shapes come from.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

Box = tuple[float, float, float, float]
Point = tuple[float, float]


def box_center(box: Box) -> Point:
    """Centroid of a box."""
    x, y, w, h = box
    return (x + w / 2, y + h / 2)


def box_area(box: Box) -> float:
    return box[2] * box[3]


def box_diagonal(box: Box) -> float:
    return math.sqrt(box[2] ** 2 + box[3] ** 2)


def box_radius(box: Box) -> float:
    """Half the larger side: the radius of the circle a box is drawn as."""
    return max(box[2], box[3]) / 2


def point_in_box(point: Point, box: Box) -> bool:
    """Inclusive point-in-rectangle test."""
    px, py = point
    x, y, w, h = box
    return x <= px <= x + w and y <= py <= y + h


def overlap_ratio(a: Box, b: Box) -> float:
    """Intersection area divided by the smaller of the two box areas.

    Disjoint or edge-touching boxes give 0. A zero-area box that still
    intersects gives inf, which any positive threshold treats as overlap.
    """
    x1 = max(a[0], b[0])
    y1 = max(a[1], b[1])
    x2 = min(a[0] + a[2], b[0] + b[2])
    y2 = min(a[1] + a[3], b[1] + b[3])

    if x2 <= x1 or y2 <= y1:
        return 0.0

    intersection = (x2 - x1) * (y2 - y1)
    smaller = min(box_area(a), box_area(b))
    if smaller <= 0:
        return float("inf")
    return intersection / smaller


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def angle_degrees(origin: Point, target: Point) -> float:
    """atan2 angle of origin→target in degrees, (-180, 180]. Screen space: +90° points down."""
    return math.degrees(math.atan2(target[1] - origin[1], target[0] - origin[0]))


def distances_from(point: Point, centers: NDArray[np.float64]) -> NDArray[np.float64]:
    """Distance from one point to each row of an Nx2 array of centers."""
    if len(centers) == 0:
        return np.empty(0)
    return np.hypot(centers[:, 0] - point[0], centers[:, 1] - point[1])
