"""Point cloud of identified 3D points with geometric queries.

All queries take two point ids and return None when one of the ids is not
in the cloud. The metrics are computed in double precision with numpy.
"""

import logging
from collections.abc import ItemsView, Iterator
from dataclasses import dataclass

import numpy as np

from ..models import Point3D

log = logging.getLogger(__name__)


class PointCloud:
    """A collection of 3D points with unique integer ids.

    Points are immutable, a point is replaced by removing and adding it again.
    The cloud is not thread safe, concurrent mutation has to be serialized by
    the caller.
    """

    def __init__(self) -> None:
        self._points: dict[int, Point3D] = {}

    def add_point(self, point_id: int, point: Point3D) -> bool:
        """Add a point under a unique id.

        Returns
        -------
        bool
            True if the point was added, False if the id already exists

        Raises
        ------
        ValueError
            If point is None
        """
        if point is None:
            raise ValueError("Point cannot be None")
        if point_id in self._points:
            log.debug(f"Point id {point_id} already exists, keeping {self._points[point_id]}")
            return False
        self._points[point_id] = point
        return True

    def get_point(self, point_id: int) -> Point3D | None:
        return self._points.get(point_id)

    def remove_point(self, point_id: int) -> bool:
        """Remove a point, False if the id does not exist."""
        return self._points.pop(point_id, None) is not None

    def size(self) -> int:
        return len(self._points)

    def ids(self) -> list[int]:
        return list(self._points)

    def items(self) -> ItemsView[int, Point3D]:
        return self._points.items()

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, point_id: object) -> bool:
        return point_id in self._points

    def __iter__(self) -> Iterator[int]:
        return iter(self._points)

    def _delta(self, id1: int, id2: int) -> np.ndarray | None:
        point1 = self._points.get(id1)
        point2 = self._points.get(id2)
        if point1 is None or point2 is None:
            return None
        return point2.to_array() - point1.to_array()

    def distance(self, id1: int, id2: int) -> float | None:
        """Calculate the Euclidean distance between two points.

        Parameters
        ----------
        id1 : int
            Id of the first point
        id2 : int
            Id of the second point

        Returns
        -------
        float | None
            3D distance, None if one of the points does not exist
        """
        delta = self._delta(id1, id2)
        if delta is None:
            return None
        return float(np.sqrt(np.sum(delta**2)))

    def slope(self, id1: int, id2: int) -> float | None:
        """Calculate the angle between the segment and the horizontal plane.

        Positive values mean the second point is higher than the first one,
        +90 / -90 degrees mean it is directly above / below.

        Returns
        -------
        float | None
            Slope in degrees, None if one of the points does not exist
        """
        delta = self._delta(id1, id2)
        if delta is None:
            return None
        dx, dy, dz = delta
        horizontal = float(np.hypot(dx, dy))
        if horizontal == 0.0:
            if dz > 0:
                return 90.0
            if dz < 0:
                return -90.0
            return 0.0
        return float(np.degrees(np.arctan2(dz, horizontal)))

    def bearing(self, id1: int, id2: int) -> float | None:
        """Calculate the bearing from the first to the second point.

        The bearing is measured clockwise from north (positive Y axis):
        0 is north, 90 east, 180 south and 270 west.

        Returns
        -------
        float | None
            Bearing in [0, 360) degrees, None if one of the points does not
            exist or both share the same horizontal position
        """
        delta = self._delta(id1, id2)
        if delta is None:
            return None
        dx, dy, _ = delta
        if dx == 0 and dy == 0:
            return None
        bearing = float(np.degrees(np.arctan2(dx, dy)))
        return (bearing + 360.0) % 360.0

    def lowest(self) -> tuple[int, Point3D] | None:
        """Get the id and point with the smallest z, the first one on ties."""
        if not self._points:
            return None
        return min(self._points.items(), key=lambda item: item[1].z)

    def highest(self) -> tuple[int, Point3D] | None:
        """Get the id and point with the largest z, the first one on ties."""
        if not self._points:
            return None
        return max(self._points.items(), key=lambda item: item[1].z)

    def __repr__(self) -> str:
        return f"PointCloud(size={len(self._points)})"


@dataclass(frozen=True)
class PointAnalysis:
    """Geometric relation between the lowest and the highest point of a cloud."""

    lowest_id: int
    lowest: Point3D
    highest_id: int
    highest: Point3D
    distance: float
    slope: float
    bearing: float | None


def analyze_points(cloud: PointCloud) -> PointAnalysis | None:
    """Compare the lowest and the highest point of the cloud.

    Returns
    -------
    PointAnalysis | None
        Analysis result, None if the cloud has fewer than two points
    """
    if len(cloud) < 2:
        log.info(f"Not enough points for calculations: {len(cloud)}")
        return None
    lowest = cloud.lowest()
    highest = cloud.highest()
    if lowest is None or highest is None:
        return None
    lowest_id, lowest_point = lowest
    highest_id, highest_point = highest
    distance = cloud.distance(lowest_id, highest_id)
    slope = cloud.slope(lowest_id, highest_id)
    if distance is None or slope is None:
        return None
    return PointAnalysis(
        lowest_id=lowest_id,
        lowest=lowest_point,
        highest_id=highest_id,
        highest=highest_point,
        distance=distance,
        slope=slope,
        bearing=cloud.bearing(lowest_id, highest_id),
    )
