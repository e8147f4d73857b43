import math
import re
from typing import Dict, Optional

from venue_planner.config import DEFAULT_CONFIG, PlannerConfig
from venue_planner.core.models import CellValue


class CellClassifier:
    """Recognise block-name tokens and stall numbers in cell values.

    A block name is a short token written with a single script: ASCII
    letters, katakana or hiragana.  A stall number is an integral value in
    the configured label range, written either as a number or as digits.
    """

    def __init__(self, config: Optional[PlannerConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._name_patterns: Dict[str, re.Pattern] = {
            "katakana": re.compile(r"^[ア-ンァ-ヴー]+$"),
            "hiragana": re.compile(r"^[あ-んぁ-ゔー]+$"),
            "alphabet": re.compile(r"^[A-Za-z]+$"),
        }
        self._digits = re.compile(r"^\d+(\.0+)?$")

    def is_block_name(self, value: CellValue) -> bool:
        if value is None or isinstance(value, (int, float)):
            return False
        text = str(value).strip()
        if not text or len(text) > self.config.max_block_name_length:
            return False
        return any(pattern.match(text) for pattern in self._name_patterns.values())

    def stall_label(self, value: CellValue) -> Optional[int]:
        """Return the stall number a value denotes, or None."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            if not math.isfinite(value) or value != int(value):
                return None
            label = int(value)
        else:
            text = str(value).strip()
            if not self._digits.match(text):
                return None
            label = int(text.split(".")[0])
        if self.config.min_stall_label <= label <= self.config.max_stall_label:
            return label
        return None

    def is_numeric(self, value: CellValue) -> bool:
        """Any number or digit string, regardless of label range."""
        if value is None or isinstance(value, bool):
            return False
        if isinstance(value, (int, float)):
            return True
        return bool(self._digits.match(str(value).strip()))
