import json
import logging
from datetime import datetime

from venue_planner.errors import ParseError
from venue_planner.project.day_plan import PLAN_VERSION, DayPlan

logger = logging.getLogger(__name__)


class ProjectManager:
    def save_plan(self, filepath, plan: DayPlan):
        """Single-file day plan format"""
        project = plan.to_dict()
        project['created'] = datetime.now().isoformat()
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(project, f, indent=2, ensure_ascii=False)
        logger.info("Saved plan %s/%s to %s", plan.event_id, plan.day, filepath)

    def load_plan(self, filepath, config=None) -> DayPlan:
        try:
            with open(filepath, encoding='utf-8') as f:
                project = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"Not a day plan file: {filepath}") from e
        if project.get('version') != PLAN_VERSION:
            logger.warning("Plan file %s has version %s, expected %s",
                           filepath, project.get('version'), PLAN_VERSION)
        try:
            return DayPlan.from_dict(project, config)
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Incomplete day plan file: {filepath}") from e
