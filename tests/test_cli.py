import io
import json
import logging

import pytest

from venue_planner import cli
from venue_planner.core.workbook_reader import WorkbookReader
from venue_planner.errors import ParseError


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("venue_planner")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def run(monkeypatch, capsys, argv, request):
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(request) if request is not None else ""))
    code = cli.main(argv)
    return code, json.loads(capsys.readouterr().out)


REQUEST = {
    "halls": [{"id": "h1", "name": "Hall 1", "vertices": [[1, 1], [1, 10], [10, 10], [10, 1]]}],
    "items": [
        {"id": "i", "block_name": "A", "number_label": "5-1"},
        {"id": "x", "block_name": "Q", "number_label": "1"},
    ],
    "visit_order": ["i", "x"],
}


def test_route_for_day_sheet(monkeypatch, capsys, workbook_path):
    code, result = run(monkeypatch, capsys, [str(workbook_path), "--day", "1日目"], REQUEST)
    assert code == 0
    assert result["success"] is True
    assert [(b["name"], b["hall_id"]) for b in result["blocks"]] == [("A", "h1")]
    assert result["visit_points"] == [{"row": 2, "col": 4, "order": 1, "item_ids": ["i"]}]
    assert result["segments"] == []
    assert result["orphans"] == ["x"]


def test_first_day_is_default_and_empty_request_works(monkeypatch, capsys, workbook_path):
    code, result = run(monkeypatch, capsys, [str(workbook_path)], None)
    assert code == 0
    assert result["day"] == "1日目"
    assert result["visit_order"] == []


def test_save_writes_plan(monkeypatch, capsys, workbook_path, tmp_path):
    target = tmp_path / "plan.json"
    code, _ = run(monkeypatch, capsys, [str(workbook_path), "--save", str(target), "--event", "ev"], REQUEST)
    assert code == 0
    saved = json.loads(target.read_text(encoding="utf-8"))
    assert saved["event_id"] == "ev"
    assert saved["visit_order"] == ["i", "x"]


def test_unknown_day_reports_failure(monkeypatch, capsys, workbook_path):
    code, result = run(monkeypatch, capsys, [str(workbook_path), "--day", "5日目"], REQUEST)
    assert code == 1
    assert result["success"] is False
    assert "5日目" in result["error"]


def test_bad_request_reports_failure(monkeypatch, capsys, workbook_path):
    code, result = run(monkeypatch, capsys, [str(workbook_path)], ["not", "an", "object"])
    assert code == 1
    assert result["success"] is False


def test_broken_sheet_for_another_day_is_not_read(monkeypatch, capsys, workbook_path):
    original = WorkbookReader.read_sheet

    def read_sheet(self, name):
        if name == "2日目":
            raise ParseError("2日目 is broken")
        return original(self, name)

    monkeypatch.setattr(WorkbookReader, "read_sheet", read_sheet)
    code, result = run(monkeypatch, capsys, [str(workbook_path), "--day", "1日目"], REQUEST)
    assert code == 0
    assert [b["name"] for b in result["blocks"]] == ["A"]
