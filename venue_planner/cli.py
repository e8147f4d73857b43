"""
Command line entry point.

Reads a venue workbook and a JSON request on stdin, writes the detected
blocks, visit points and route segments as JSON on stdout::

    venue-planner venue.xlsx --day 1日目 < request.json

The request may carry ``halls``, ``items``, ``visit_order``, ``hall_order``,
``sub_orders`` and the flags ``reorder`` / ``priority_first``.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from venue_planner.catalog.item_catalog import CatalogItem
from venue_planner.config import DEFAULT_CONFIG
from venue_planner.core.block_detector import BlockDetector
from venue_planner.core.grid_builder import GridModelBuilder
from venue_planner.core.models import Hall
from venue_planner.core.workbook_reader import WorkbookReader
from venue_planner.errors import ParseError, VenuePlannerError
from venue_planner.logging_config import setup_logging
from venue_planner.project.day_plan import DayPlan
from venue_planner.project.project_manager import ProjectManager

logger = logging.getLogger(__name__)


def plan_route(workbook_path: str, request: Dict[str, Any], day: Optional[str] = None,
               event_id: str = "") -> DayPlan:
    """Build the day plan for one sheet of a workbook from a request dict."""
    reader = WorkbookReader(workbook_path, DEFAULT_CONFIG)
    days = reader.day_sheets()
    if day is None:
        if not days:
            raise ParseError(f"No day sheets in {workbook_path}")
        day = days[0]
    if day not in days:
        raise ParseError(f"Day sheet '{day}' not found; available: {', '.join(days) or 'none'}")
    # Other day sheets are never built
    venue_map = GridModelBuilder(DEFAULT_CONFIG).build(reader.read_sheet(day))
    venue_map.blocks = BlockDetector(DEFAULT_CONFIG).detect(venue_map)

    halls = [Hall.from_dict(h) for h in request.get('halls') or []]
    items = [CatalogItem.from_dict(i) for i in request.get('items') or []]
    plan = DayPlan(
        event_id=event_id,
        day=day,
        venue_map=venue_map,
        halls=halls,
        items=items,
        visit_order=request.get('visit_order') or [],
        hall_order=request.get('hall_order'),
        sub_orders=request.get('sub_orders'),
    )
    if request.get('reorder'):
        plan.reorder_by_hall_order(priority_first=bool(request.get('priority_first')))
    return plan


def plan_to_result(plan: DayPlan) -> Dict[str, Any]:
    return {
        'success': True,
        'day': plan.day,
        'grid': {'rows': plan.venue_map.rows, 'cols': plan.venue_map.cols},
        'blocks': [
            dict(block.to_dict(), hall_id=plan.block_halls.get(block.name))
            for block in plan.venue_map.blocks
        ],
        'visit_order': list(plan.visit_order),
        'visit_points': [
            {'row': p.row, 'col': p.col, 'order': p.order, 'item_ids': p.item_ids}
            for p in plan.visit_points()
        ],
        'segments': [segment.to_dict() for segment in plan.route_segments()],
        'orphans': plan.orphans(),
    }


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan a visit route through a venue workbook")
    parser.add_argument("workbook", help="path to the .xlsx venue workbook")
    parser.add_argument("--day", help="day sheet name, e.g. 1日目 (default: first day sheet)")
    parser.add_argument("--event", default="", help="event id stored with a saved plan")
    parser.add_argument("--save", help="write the resulting day plan to this JSON file")
    parser.add_argument("--log-level", default="WARNING", help="logging level (default: WARNING)")
    parser.add_argument("--log-file", help="also write log records to this file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logging(getattr(logging, str(args.log_level).upper(), logging.WARNING), args.log_file)

    exit_code = 0
    try:
        raw_input = sys.stdin.read()
        request = json.loads(raw_input) if raw_input and raw_input.strip() else {}
        if not isinstance(request, dict):
            raise ValueError('Request JSON must be an object')

        plan = plan_route(args.workbook, request, day=args.day, event_id=args.event)
        if args.save:
            ProjectManager().save_plan(args.save, plan)
        result = plan_to_result(plan)
    except (VenuePlannerError, ValueError, KeyError, TypeError) as exc:
        logger.error("Route planning failed: %s", exc)
        result = {
            'success': False,
            'blocks': [],
            'visit_points': [],
            'segments': [],
            'orphans': [],
            'error': str(exc),
        }
        exit_code = 1

    sys.stdout.write(json.dumps(result, ensure_ascii=False) + '\n')
    sys.stdout.flush()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
