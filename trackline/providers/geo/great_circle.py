"""
Great-circle path generation for the flight arc

Points are produced by spherical linear interpolation between the two
endpoints on the unit sphere. A fresh list is returned on every call.
"""

import math
from typing import List, Tuple

from ...constants import DEFAULT_PATH_POINTS
from ...models import Coordinates

Vector = Tuple[float, float, float]

# sin(d) below this is treated as zero
_EPSILON = 1e-12


def _to_vector(point: Coordinates) -> Vector:
    lat, lon = math.radians(point[0]), math.radians(point[1])
    return (
        math.cos(lat) * math.cos(lon),
        math.cos(lat) * math.sin(lon),
        math.sin(lat),
    )


def _to_coordinates(x: float, y: float, z: float) -> Coordinates:
    return (
        math.degrees(math.atan2(z, math.sqrt(x * x + y * y))),
        math.degrees(math.atan2(y, x)),
    )


def angular_distance(start: Coordinates, end: Coordinates) -> float:
    """Central angle between two points in radians (haversine)."""
    lat1, lon1 = math.radians(start[0]), math.radians(start[1])
    lat2, lon2 = math.radians(end[0]), math.radians(end[1])
    h = (
        math.sin((lat1 - lat2) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon1 - lon2) / 2) ** 2
    )
    return 2 * math.asin(min(1.0, math.sqrt(h)))


def _orthogonal(v: Vector) -> Vector:
    """A unit vector perpendicular to v."""
    axis = (0.0, 0.0, 1.0) if abs(v[2]) < 0.9 else (1.0, 0.0, 0.0)
    cx = v[1] * axis[2] - v[2] * axis[1]
    cy = v[2] * axis[0] - v[0] * axis[2]
    cz = v[0] * axis[1] - v[1] * axis[0]
    norm = math.sqrt(cx * cx + cy * cy + cz * cz)
    return cx / norm, cy / norm, cz / norm


def great_circle_points(
    start: Coordinates,
    end: Coordinates,
    num_points: int = DEFAULT_PATH_POINTS,
) -> List[Coordinates]:
    """
    Interpolate the shortest path between two coordinates.

    Args:
        start: (lat, lon) in degrees
        end: (lat, lon) in degrees
        num_points: Number of segments; num_points + 1 points are returned

    Returns:
        List of (lat, lon), first == start and last == end

    Raises:
        ValueError: num_points < 1
    """
    if num_points < 1:
        raise ValueError(f"num_points must be >= 1, got {num_points}")

    d = angular_distance(start, end)
    sin_d = math.sin(d)

    if d < _EPSILON:
        return [(float(start[0]), float(start[1]))] * (num_points + 1)

    a = _to_vector(start)

    if abs(sin_d) < _EPSILON:
        # Antipodal: every great circle through a works, pick one
        b = _orthogonal(a)
        points = []
        for i in range(num_points + 1):
            angle = d * i / num_points
            c, s = math.cos(angle), math.sin(angle)
            points.append(_to_coordinates(*(c * a[k] + s * b[k] for k in range(3))))
        points[-1] = (float(end[0]), float(end[1]))
        return points

    b = _to_vector(end)
    points = []
    for i in range(num_points + 1):
        f = i / num_points
        wa = math.sin((1 - f) * d) / sin_d
        wb = math.sin(f * d) / sin_d
        points.append(_to_coordinates(*(wa * a[k] + wb * b[k] for k in range(3))))
    return points


def heading(current: Coordinates, following: Coordinates) -> float:
    """Screen heading in degrees from one path point to the next."""
    return math.degrees(math.atan2(following[1] - current[1], following[0] - current[0]))
