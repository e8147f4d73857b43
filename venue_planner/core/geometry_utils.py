from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid
from typing import List, Sequence, Tuple

from venue_planner.core.models import Coord


class GeometryUtils:
    @staticmethod
    def create_polygon(points: Sequence[Tuple[float, float]]) -> BaseGeometry:
        """Polygon over (row, col) vertices; self-intersecting outlines are repaired."""
        polygon = Polygon(points)
        if not polygon.is_valid:
            # make_valid splits a bowtie into its lobes, i.e. even-odd filling
            return make_valid(polygon)
        return polygon

    @staticmethod
    def point_in_polygon(point: Tuple[float, float], polygon: BaseGeometry) -> bool:
        """Boundary points count as inside."""
        return polygon.covers(Point(point))

    @staticmethod
    def polygon_bounds(polygon: BaseGeometry) -> Tuple[float, float, float, float]:
        return polygon.bounds

    @staticmethod
    def simplify_polyline(path: Sequence[Coord], tolerance: float = 1e-6) -> List[Coord]:
        """Drop intermediate points lying on a straight run between their neighbours."""
        points = list(path)
        if len(points) <= 2:
            return points
        simplified = LineString(points).simplify(tolerance, preserve_topology=False)
        result = [(int(round(x)), int(round(y))) for x, y in simplified.coords]
        # Endpoints are kept by simplify, but guard against a collapsed line
        if result[0] != points[0]:
            result.insert(0, points[0])
        if result[-1] != points[-1]:
            result.append(points[-1])
        return result
