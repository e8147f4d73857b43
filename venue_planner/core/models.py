from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

CellValue = Union[str, int, float, None]
Coord = Tuple[int, int]

SIDES = ("top", "right", "bottom", "left")


class BorderKind(str, Enum):
    NONE = "none"
    THIN = "thin"
    MEDIUM = "medium"
    THICK = "thick"
    DOUBLE = "double"

    @property
    def is_strong(self) -> bool:
        """Medium and heavier borders enclose a block."""
        return self in (BorderKind.MEDIUM, BorderKind.THICK, BorderKind.DOUBLE)


@dataclass(frozen=True)
class BorderStyle:
    kind: BorderKind
    color: str = "#000000"


@dataclass
class CellBorders:
    top: Optional[BorderStyle] = None
    right: Optional[BorderStyle] = None
    bottom: Optional[BorderStyle] = None
    left: Optional[BorderStyle] = None

    def side(self, name: str) -> Optional[BorderStyle]:
        return getattr(self, name)

    def is_strong(self, name: str) -> bool:
        style = self.side(name)
        return style is not None and style.kind.is_strong

    def __bool__(self) -> bool:
        return any(self.side(name) is not None for name in SIDES)


@dataclass
class Cell:
    row: int
    col: int
    value: CellValue = None
    background_color: Optional[str] = None
    borders: CellBorders = field(default_factory=CellBorders)
    # True for cells covered by a merge other than its anchor
    is_merged: bool = False
    merge_anchor: Optional[Coord] = None

    @property
    def has_value(self) -> bool:
        if self.value is None:
            return False
        return str(self.value).strip() != ""


@dataclass(frozen=True)
class Rect:
    """Inclusive cell rectangle."""
    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @property
    def centroid(self) -> Tuple[float, float]:
        return ((self.start_row + self.end_row) / 2, (self.start_col + self.end_col) / 2)

    @property
    def area(self) -> int:
        return (self.end_row - self.start_row + 1) * (self.end_col - self.start_col + 1)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(minx, miny, maxx, maxy) with rows on x and columns on y."""
        return (self.start_row, self.start_col, self.end_row, self.end_col)

    def contains(self, row: int, col: int) -> bool:
        return self.start_row <= row <= self.end_row and self.start_col <= col <= self.end_col

    def union(self, other: "Rect") -> "Rect":
        return Rect(
            min(self.start_row, other.start_row),
            min(self.start_col, other.start_col),
            max(self.end_row, other.end_row),
            max(self.end_col, other.end_col),
        )

    def cells(self) -> Iterator[Coord]:
        for row in range(self.start_row, self.end_row + 1):
            for col in range(self.start_col, self.end_col + 1):
                yield row, col

    def to_dict(self) -> Dict[str, int]:
        return {
            'start_row': self.start_row,
            'start_col': self.start_col,
            'end_row': self.end_row,
            'end_col': self.end_col,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rect":
        return cls(int(data['start_row']), int(data['start_col']),
                   int(data['end_row']), int(data['end_col']))


@dataclass(frozen=True)
class MergedRegion:
    start_row: int
    start_col: int
    end_row: int
    end_col: int
    value: CellValue = None

    @property
    def anchor(self) -> Coord:
        return (self.start_row, self.start_col)

    @property
    def rect(self) -> Rect:
        return Rect(self.start_row, self.start_col, self.end_row, self.end_col)

    @property
    def area(self) -> int:
        return self.rect.area


@dataclass(frozen=True)
class NumberCell:
    row: int
    col: int
    label: int


@dataclass
class Block:
    id: str
    name: str
    bounds: Rect
    number_cells: List[NumberCell] = field(default_factory=list)
    color: str = "#CCCCCC"
    auto_detected: bool = True

    def find_number_cell(self, label: int) -> Optional[NumberCell]:
        for number_cell in self.number_cells:
            if number_cell.label == label:
                return number_cell
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'bounds': self.bounds.to_dict(),
            'number_cells': [[n.row, n.col, n.label] for n in self.number_cells],
            'color': self.color,
            'auto_detected': self.auto_detected,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        return cls(
            id=data['id'],
            name=data['name'],
            bounds=Rect.from_dict(data['bounds']),
            number_cells=[NumberCell(int(r), int(c), int(label)) for r, c, label in data.get('number_cells', [])],
            color=data.get('color', "#CCCCCC"),
            auto_detected=data.get('auto_detected', True),
        )


@dataclass
class Hall:
    id: str
    name: str
    vertices: List[Tuple[float, float]] = field(default_factory=list)
    color: str = "#3498DB"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'vertices': [[row, col] for row, col in self.vertices],
            'color': self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Hall":
        return cls(
            id=str(data['id']),
            name=data.get('name', str(data['id'])),
            vertices=[(float(row), float(col)) for row, col in data.get('vertices', [])],
            color=data.get('color', "#3498DB"),
        )


@dataclass
class VenueMap:
    rows: int
    cols: int
    cells: List[Cell] = field(default_factory=list)
    merged_regions: List[MergedRegion] = field(default_factory=list)
    blocks: List[Block] = field(default_factory=list)
    sheet_name: str = ""

    def index(self, row: int, col: int) -> int:
        return (row - 1) * self.cols + (col - 1)

    def in_bounds(self, row: int, col: int) -> bool:
        return 1 <= row <= self.rows and 1 <= col <= self.cols

    def cell_at(self, row: int, col: int) -> Optional[Cell]:
        if not self.in_bounds(row, col):
            return None
        return self.cells[self.index(row, col)]

    def find_block(self, name: str) -> Optional[Block]:
        for block in self.blocks:
            if block.name == name:
                return block
        return None

    def to_dict(self) -> Dict[str, Any]:
        cells = []
        for cell in self.cells:
            if not (cell.has_value or cell.background_color or cell.borders):
                continue
            entry: Dict[str, Any] = {'row': cell.row, 'col': cell.col}
            if cell.has_value:
                entry['value'] = cell.value
            if cell.background_color:
                entry['background_color'] = cell.background_color
            borders = {}
            for name in SIDES:
                style = cell.borders.side(name)
                if style is not None:
                    borders[name] = [style.kind.value, style.color]
            if borders:
                entry['borders'] = borders
            cells.append(entry)
        return {
            'sheet_name': self.sheet_name,
            'rows': self.rows,
            'cols': self.cols,
            'cells': cells,
            'merged_regions': [
                [m.start_row, m.start_col, m.end_row, m.end_col, m.value] for m in self.merged_regions
            ],
            'blocks': [block.to_dict() for block in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VenueMap":
        rows, cols = int(data['rows']), int(data['cols'])
        cells = [Cell(r, c) for r in range(1, rows + 1) for c in range(1, cols + 1)]
        venue_map = cls(rows=rows, cols=cols, cells=cells, sheet_name=data.get('sheet_name', ""))
        for entry in data.get('cells', []):
            cell = venue_map.cell_at(entry['row'], entry['col'])
            if cell is None:
                continue
            cell.value = entry.get('value')
            cell.background_color = entry.get('background_color')
            for name, (kind, color) in entry.get('borders', {}).items():
                setattr(cell.borders, name, BorderStyle(BorderKind(kind), color))
        for start_row, start_col, end_row, end_col, value in data.get('merged_regions', []):
            region = MergedRegion(start_row, start_col, end_row, end_col, value)
            venue_map.merged_regions.append(region)
            for row, col in region.rect.cells():
                cell = venue_map.cell_at(row, col)
                if cell is not None:
                    cell.merge_anchor = region.anchor
                    cell.is_merged = (row, col) != region.anchor
        venue_map.blocks = [Block.from_dict(b) for b in data.get('blocks', [])]
        return venue_map


@dataclass(frozen=True)
class RouteSegment:
    start: Coord
    end: Coord
    path: Tuple[Coord, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start': list(self.start),
            'end': list(self.end),
            'path': [list(point) for point in self.path],
        }


class Priority(int, Enum):
    NONE = 0
    PRIORITY = 1
    HIGHEST = 2


@dataclass(frozen=True)
class GroupKey:
    """Grouping tag of a visit item: derived hall plus priority tier."""
    hall_id: Optional[str]
    priority: Priority = Priority.NONE


@dataclass
class VisitGroup:
    key: GroupKey
    hall_name: str
    item_ids: List[str] = field(default_factory=list)


@dataclass
class VisitPoint:
    row: int
    col: int
    order: int
    item_ids: List[str] = field(default_factory=list)

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)


class CellVisitState(str, Enum):
    DEFAULT = "default"
    HAS_ITEMS = "has_items"
    PARTIAL_VISIT = "partial_visit"
    ALL_VISIT = "all_visit"
