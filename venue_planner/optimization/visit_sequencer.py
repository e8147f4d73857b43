"""
visit_sequencer.py
==================

Editing of a day's visit list: the ordered, duplicate-free sequence of
catalogue item ids the user intends to walk to.

The functions in this module are pure: they take the current order as a
sequence and return a new tuple, leaving the input untouched.  Hall
membership is never stored with the list; callers pass a ``hall_of``
function that derives an item's hall id from the current map and hall
outlines, or returns None when the item has no hall.

Moves respect hall boundaries: an item may only trade places with a
neighbour from the same hall.  An item without a hall (orphaned, outside
every outline, or no halls drawn yet) is not constrained.

``VisitOrder`` wraps the functions with undo/redo history for interactive
editing.
"""

import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from venue_planner.config import DEFAULT_CONFIG
from venue_planner.core.models import GroupKey, Hall, Priority, VisitGroup

logger = logging.getLogger(__name__)

HallLookup = Callable[[str], Optional[str]]
PriorityLookup = Callable[[str], Priority]
Order = Tuple[str, ...]

NO_HALL_NAME = "(no hall)"


def same_hall(first: str, second: str, hall_of: HallLookup) -> bool:
    first_hall, second_hall = hall_of(first), hall_of(second)
    if first_hall is None or second_hall is None:
        return True
    return first_hall == second_hall


def append(order: Sequence[str], ids: Iterable[str], candidates: Optional[Sequence[str]] = None) -> Order:
    """Add ids not yet in the list.

    With ``candidates`` (the list the ids were picked from) new ids follow
    their order in that list and ids missing from it are ignored; without
    it they follow the order given.
    """
    present = set(order)
    if candidates is not None:
        rank: Dict[str, int] = {}
        for position, item_id in enumerate(candidates):
            rank.setdefault(item_id, position)
        wanted = sorted({item_id for item_id in ids if item_id in rank}, key=rank.__getitem__)
    else:
        wanted = list(dict.fromkeys(ids))
    return tuple(order) + tuple(item_id for item_id in wanted if item_id not in present)


def remove(order: Sequence[str], ids: Iterable[str]) -> Order:
    dropped = set(ids)
    return tuple(item_id for item_id in order if item_id not in dropped)


def move_up(order: Sequence[str], item_id: str, hall_of: HallLookup,
            selected: Optional[Iterable[str]] = None) -> Order:
    return _move(order, item_id, hall_of, selected, -1)


def move_down(order: Sequence[str], item_id: str, hall_of: HallLookup,
              selected: Optional[Iterable[str]] = None) -> Order:
    return _move(order, item_id, hall_of, selected, 1)


def _move(order: Sequence[str], item_id: str, hall_of: HallLookup,
          selected: Optional[Iterable[str]], step: int) -> Order:
    current = list(order)
    if item_id not in current:
        return tuple(current)

    selected_set = set(selected or ())
    if item_id in selected_set and len(selected_set & set(current)) > 1:
        # Group move: the selection travels as one block past a single neighbour
        group = [i for i in current if i in selected_set]
        edge = group[0] if step < 0 else group[-1]
        edge_index = current.index(edge)
        neighbour_index = edge_index + step
        if not 0 <= neighbour_index < len(current):
            return tuple(current)
        neighbour = current[neighbour_index]
        if not same_hall(edge, neighbour, hall_of):
            logger.debug("Group move rejected: %s and %s are in different halls", edge, neighbour)
            return tuple(current)
        rest = [i for i in current if i not in selected_set]
        insert_at = rest.index(neighbour) + (1 if step > 0 else 0)
        return tuple(rest[:insert_at] + group + rest[insert_at:])

    index = current.index(item_id)
    neighbour_index = index + step
    if not 0 <= neighbour_index < len(current):
        return tuple(current)
    if not same_hall(item_id, current[neighbour_index], hall_of):
        logger.debug("Move rejected: %s and %s are in different halls", item_id, current[neighbour_index])
        return tuple(current)
    current[index], current[neighbour_index] = current[neighbour_index], current[index]
    return tuple(current)


def move_to_first(order: Sequence[str], item_id: str) -> Order:
    if item_id not in order:
        return tuple(order)
    return (item_id,) + tuple(i for i in order if i != item_id)


def move_to_last(order: Sequence[str], item_id: str) -> Order:
    if item_id not in order:
        return tuple(order)
    return tuple(i for i in order if i != item_id) + (item_id,)


def swap_within_hall(order: Sequence[str], first: str, second: str, hall_of: HallLookup) -> Order:
    current = list(order)
    if first == second or first not in current or second not in current:
        return tuple(current)
    if not same_hall(first, second, hall_of):
        return tuple(current)
    i, j = current.index(first), current.index(second)
    current[i], current[j] = current[j], current[i]
    return tuple(current)


def move_within_hall(order: Sequence[str], item_id: str, target_id: str, hall_of: HallLookup) -> Order:
    """Drop ``item_id`` onto the position held by ``target_id``."""
    current = list(order)
    if item_id == target_id or item_id not in current or target_id not in current:
        return tuple(current)
    if not same_hall(item_id, target_id, hall_of):
        return tuple(current)
    target_index = current.index(target_id)
    current.remove(item_id)
    current.insert(target_index, item_id)
    return tuple(current)


def reverse_range_within_hall(order: Sequence[str], first: str, last: str, hall_of: HallLookup) -> Order:
    """Reverse the hall's items lying between ``first`` and ``last``; other items stay put."""
    current = list(order)
    if first not in current or last not in current:
        return tuple(current)
    if not same_hall(first, last, hall_of):
        return tuple(current)
    i, j = sorted((current.index(first), current.index(last)))
    hall = hall_of(first) if hall_of(first) is not None else hall_of(last)
    positions = [k for k in range(i, j + 1) if hall is None or hall_of(current[k]) == hall]
    values = [current[k] for k in positions]
    for k, value in zip(positions, reversed(values)):
        current[k] = value
    return tuple(current)


def insert_by_hall(order: Sequence[str], item_id: str, hall_of: HallLookup,
                   hall_order: Sequence[str] = ()) -> Order:
    """Add an item next to the others from its hall.

    Goes after the last item of the same hall, otherwise before the first
    item of a hall that comes later in ``hall_order``, otherwise at the end.
    """
    current = list(order)
    if item_id in current:
        return tuple(current)
    hall = hall_of(item_id)
    if hall is None:
        return tuple(current) + (item_id,)

    same = [k for k, other in enumerate(current) if hall_of(other) == hall]
    if same:
        current.insert(same[-1] + 1, item_id)
        return tuple(current)

    rank = {hall_id: position for position, hall_id in enumerate(dict.fromkeys(hall_order))}
    if hall in rank:
        for k, other in enumerate(current):
            other_hall = hall_of(other)
            if other_hall in rank and rank[other_hall] > rank[hall]:
                current.insert(k, item_id)
                return tuple(current)
    current.append(item_id)
    return tuple(current)


def reorder_by_hall_order(order: Sequence[str], hall_of: HallLookup, hall_order: Sequence[str],
                          sub_orders: Optional[Mapping[Optional[str], Sequence[str]]] = None,
                          priority_of: Optional[PriorityLookup] = None) -> Order:
    """Regroup the list hall by hall.

    Halls listed in ``hall_order`` come first, then any other hall present
    (the hall-less group included) in the order first seen.  Inside a hall,
    ids named in its sub-order lead in that sequence and the rest keep
    their relative order.  With ``priority_of`` higher priorities lead
    within each hall.  Applying the reorder twice gives the same list.
    """
    sub_orders = sub_orders or {}
    partitions: Dict[Optional[str], List[str]] = {}
    for item_id in order:
        partitions.setdefault(hall_of(item_id), []).append(item_id)

    listed = [hall for hall in dict.fromkeys(hall_order) if hall in partitions]
    sequence = listed + [hall for hall in partitions if hall not in set(listed)]

    result: List[str] = []
    for hall in sequence:
        rank = {item_id: position for position, item_id in enumerate(sub_orders.get(hall) or ())}

        def sort_key(item_id: str, rank=rank):
            priority = priority_of(item_id) if priority_of else Priority.NONE
            if item_id in rank:
                return (-int(priority), 0, rank[item_id])
            return (-int(priority), 1, 0)

        # Stable sort keeps unlisted ids in their current order
        result.extend(sorted(partitions[hall], key=sort_key))
    return tuple(result)


def group_by_hall(order: Sequence[str], hall_of: HallLookup, hall_order: Sequence[str] = (),
                  halls: Sequence[Hall] = (), priority_of: Optional[PriorityLookup] = None) -> List[VisitGroup]:
    """Display groups: halls in hall order, unlisted halls as seen, hall-less last."""
    names = {hall.id: hall.name for hall in halls}
    groups: Dict[GroupKey, VisitGroup] = {}
    for item_id in order:
        priority = priority_of(item_id) if priority_of else Priority.NONE
        key = GroupKey(hall_of(item_id), priority)
        if key not in groups:
            name = names.get(key.hall_id, key.hall_id) if key.hall_id is not None else NO_HALL_NAME
            groups[key] = VisitGroup(key=key, hall_name=name)
        groups[key].item_ids.append(item_id)

    hall_rank = {hall_id: position for position, hall_id in enumerate(dict.fromkeys(hall_order))}
    first_seen: Dict[Optional[str], int] = {}
    for key in groups:
        first_seen.setdefault(key.hall_id, len(first_seen))

    def group_key(key: GroupKey):
        if key.hall_id is None:
            return (2, 0, -int(key.priority))
        if key.hall_id in hall_rank:
            return (0, hall_rank[key.hall_id], -int(key.priority))
        return (1, first_seen[key.hall_id], -int(key.priority))

    return [groups[key] for key in sorted(groups, key=group_key)]


class VisitOrder:
    """Visit list with undo/redo history.

    Every editing method returns True when the list changed.  A rejected
    or no-op edit leaves both the list and the history untouched.
    """

    def __init__(self, item_ids: Iterable[str] = (), history_limit: int = DEFAULT_CONFIG.history_limit):
        self._items: Order = tuple(dict.fromkeys(item_ids))
        self.history_limit = history_limit
        self._undo: List[Order] = []
        self._redo: List[Order] = []

    @property
    def items(self) -> Order:
        return self._items

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id) -> bool:
        return item_id in self._items

    def index(self, item_id: str) -> int:
        return self._items.index(item_id)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def _push_undo(self, items: Order):
        self._undo.append(items)
        if len(self._undo) > self.history_limit:
            del self._undo[0]

    def _apply(self, new_items: Order) -> bool:
        if new_items == self._items:
            return False
        self._push_undo(self._items)
        self._redo.clear()
        self._items = new_items
        return True

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._items)
        self._items = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._push_undo(self._items)
        self._items = self._redo.pop()
        return True

    def replace(self, item_ids: Iterable[str]) -> bool:
        return self._apply(tuple(dict.fromkeys(item_ids)))

    def append(self, ids: Iterable[str], candidates: Optional[Sequence[str]] = None) -> bool:
        return self._apply(append(self._items, ids, candidates))

    def remove(self, ids: Iterable[str]) -> bool:
        return self._apply(remove(self._items, ids))

    def move_up(self, item_id: str, hall_of: HallLookup, selected: Optional[Iterable[str]] = None) -> bool:
        return self._apply(move_up(self._items, item_id, hall_of, selected))

    def move_down(self, item_id: str, hall_of: HallLookup, selected: Optional[Iterable[str]] = None) -> bool:
        return self._apply(move_down(self._items, item_id, hall_of, selected))

    def move_to_first(self, item_id: str) -> bool:
        return self._apply(move_to_first(self._items, item_id))

    def move_to_last(self, item_id: str) -> bool:
        return self._apply(move_to_last(self._items, item_id))

    def swap_within_hall(self, first: str, second: str, hall_of: HallLookup) -> bool:
        return self._apply(swap_within_hall(self._items, first, second, hall_of))

    def move_within_hall(self, item_id: str, target_id: str, hall_of: HallLookup) -> bool:
        return self._apply(move_within_hall(self._items, item_id, target_id, hall_of))

    def reverse_range_within_hall(self, first: str, last: str, hall_of: HallLookup) -> bool:
        return self._apply(reverse_range_within_hall(self._items, first, last, hall_of))

    def insert_by_hall(self, item_id: str, hall_of: HallLookup, hall_order: Sequence[str] = ()) -> bool:
        return self._apply(insert_by_hall(self._items, item_id, hall_of, hall_order))

    def reorder_by_hall_order(self, hall_of: HallLookup, hall_order: Sequence[str],
                              sub_orders: Optional[Mapping[Optional[str], Sequence[str]]] = None,
                              priority_of: Optional[PriorityLookup] = None) -> bool:
        return self._apply(reorder_by_hall_order(self._items, hall_of, hall_order, sub_orders, priority_of))
