import logging
from typing import Dict, Iterable, List, Optional, Sequence

from venue_planner.config import DEFAULT_CONFIG, PlannerConfig
from venue_planner.core.geometry_utils import GeometryUtils
from venue_planner.core.models import Block, Hall
from venue_planner.optimization.spatial_index import SpatialIndex

logger = logging.getLogger(__name__)


def normalise_halls(halls: Iterable[Hall], config: Optional[PlannerConfig] = None) -> List[Hall]:
    """Cap every hall outline at the configured vertex limit."""
    config = config or DEFAULT_CONFIG
    result = []
    for hall in halls:
        if len(hall.vertices) > config.max_hall_vertices:
            logger.warning("Hall '%s' has %d vertices, keeping the first %d",
                           hall.name, len(hall.vertices), config.max_hall_vertices)
            hall = Hall(hall.id, hall.name, list(hall.vertices[:config.max_hall_vertices]), hall.color)
        result.append(hall)
    return result


class HallPartitioner:
    """Assign blocks, and through them items, to polygonal halls.

    A hall with fewer than the minimum number of vertices is still being
    drawn and takes no part in the partition.  When hall outlines overlap,
    the earliest hall in the list wins.
    """

    def __init__(self, halls: Sequence[Hall], config: Optional[PlannerConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.halls = normalise_halls(halls, self.config)
        self.polygons = {}
        self.index = SpatialIndex()
        for position, hall in enumerate(self.halls):
            if len(hall.vertices) < self.config.min_hall_vertices:
                logger.debug("Hall '%s' is not fully defined yet (%d vertices)", hall.name, len(hall.vertices))
                continue
            polygon = GeometryUtils.create_polygon(hall.vertices)
            self.polygons[position] = polygon
            self.index.insert(position, GeometryUtils.polygon_bounds(polygon))

    @property
    def has_defined_halls(self) -> bool:
        return bool(self.polygons)

    def hall_at(self, row: float, col: float) -> Optional[Hall]:
        # Candidates come back in list order, so the first hit is the first match
        for position in self.index.query_point(row, col):
            if GeometryUtils.point_in_polygon((row, col), self.polygons[position]):
                return self.halls[position]
        return None

    def hall_of_block(self, block: Block) -> Optional[Hall]:
        row, col = block.bounds.centroid
        return self.hall_at(row, col)

    def assign_blocks(self, blocks: Iterable[Block]) -> Dict[str, Optional[str]]:
        """Map block name to hall id (None for blocks outside every hall)."""
        assignment: Dict[str, Optional[str]] = {}
        for block in blocks:
            hall = self.hall_of_block(block)
            assignment[block.name] = hall.id if hall else None
        unassigned = [name for name, hall_id in assignment.items() if hall_id is None]
        if unassigned and self.has_defined_halls:
            logger.info("Blocks outside every hall: %s", ", ".join(unassigned))
        return assignment

    def blocks_in_hall(self, hall: Hall, blocks: Iterable[Block]) -> List[Block]:
        found = []
        for block in blocks:
            assigned = self.hall_of_block(block)
            if assigned is not None and assigned.id == hall.id:
                found.append(block)
        return found

    def hall_by_id(self, hall_id: Optional[str]) -> Optional[Hall]:
        for hall in self.halls:
            if hall.id == hall_id:
                return hall
        return None
