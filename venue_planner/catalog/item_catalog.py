import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from venue_planner.core.models import Coord, Priority, VenueMap

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


@dataclass
class CatalogItem:
    """Shopping list entry: a stall in a named block, e.g. block "A", label "5-1"."""
    id: str
    block_name: str
    number_label: str
    event_date: str = ""
    remarks: str = ""

    @property
    def stall_label(self) -> Optional[int]:
        return extract_stall_label(self.number_label)

    @property
    def priority(self) -> Priority:
        return priority_from_remarks(self.remarks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'block_name': self.block_name,
            'number_label': self.number_label,
            'event_date': self.event_date,
            'remarks': self.remarks,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogItem":
        return cls(
            id=str(data['id']),
            block_name=str(data.get('block_name', '')),
            number_label=str(data.get('number_label', '')),
            event_date=str(data.get('event_date', '')),
            remarks=str(data.get('remarks', '') or ''),
        )


def extract_stall_label(number_label: str) -> Optional[int]:
    """Leading digit run of a label: "5-1" -> 5, "12a" -> 12, "x" -> None."""
    match = _LEADING_DIGITS.match(number_label or "")
    if not match:
        return None
    return int(match.group(1))


def priority_from_remarks(remarks: str) -> Priority:
    if not remarks:
        return Priority.NONE
    if "最優先" in remarks:
        return Priority.HIGHEST
    if "優先" in remarks:
        return Priority.PRIORITY
    return Priority.NONE


class ItemResolver:
    """Locate catalogue items on a venue map.

    An item resolves to the number cell of the block named exactly
    ``block_name`` whose label equals the item's stall label, provided
    the item is dated for the map's day (or carries no date).  Items that
    do not resolve are orphans: they stay in the visit list but take no
    part in hall or route computation.
    """

    def __init__(self, venue_map: VenueMap, day: Optional[str] = None):
        self.venue_map = venue_map
        self.day = day

    def locate(self, item: CatalogItem) -> Optional[Coord]:
        # Items catalogued for another day are not on this map
        if self.day and item.event_date and item.event_date != self.day:
            return None
        block = self.venue_map.find_block(item.block_name)
        if block is None:
            return None
        label = item.stall_label
        if label is None:
            return None
        number_cell = block.find_number_cell(label)
        if number_cell is None:
            return None
        return (number_cell.row, number_cell.col)

    def resolve_all(self, items: Iterable[CatalogItem]) -> Dict[str, Optional[Coord]]:
        locations = {item.id: self.locate(item) for item in items}
        orphans = [item_id for item_id, coord in locations.items() if coord is None]
        if orphans:
            logger.info("%d item(s) could not be placed on the map: %s", len(orphans), ", ".join(orphans))
        return locations


def item_count_by_hall(items: Iterable[CatalogItem], hall_of_block: Dict[str, Optional[str]],
                       locations: Dict[str, Optional[Coord]]) -> Dict[Optional[str], int]:
    """Count resolvable items per hall id; hall-less items count under None."""
    counts: Counter = Counter()
    for item in items:
        if locations.get(item.id) is None:
            continue
        counts[hall_of_block.get(item.block_name)] += 1
    return dict(counts)
