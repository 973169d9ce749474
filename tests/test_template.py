import json
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from evalsys.services.template import (build_score_sheet, fill_score_sheet, section_label,
                                       sheet_from_json, sheet_to_json, TemplateError)


def _layout():
    categories = [
        {"id": 2, "category_code": "B", "category_name": "인력운영", "sort_order": 2, "is_active": True},
        {"id": 1, "category_code": "A", "category_name": "기관수행능력", "sort_order": 1, "is_active": True},
        {"id": 3, "category_code": "C", "category_name": "빈 구분", "sort_order": 3, "is_active": True},
    ]
    items = []
    next_id = 1
    for cat_id, points in ((1, [20, 5, 5, 5]), (2, [5, 5, 10])):
        for order, p in enumerate(points, start=1):
            items.append({"id": next_id, "category_id": cat_id, "item_code": f"I{next_id}",
                          "item_name": f"항목 {next_id}", "max_score": p, "sort_order": order,
                          "is_quantitative": p == 10, "is_active": True})
            next_id += 1
    return categories, items


def test_section_labels():
    assert [section_label(i) for i in (0, 1, 25, 26, 27)] == ["A", "B", "Z", "AA", "AB"]


def test_sections_sum_item_points():
    sheet = build_score_sheet(*_layout())
    assert [s["title"] for s in sheet["sections"]] == ["기관수행능력", "인력운영"]
    assert [s["id"] for s in sheet["sections"]] == ["A", "B"]
    assert sheet["sections"][0]["points"] == 35
    assert sheet["sections"][1]["points"] == 20
    assert sheet["totalPoints"] == 55
    assert sheet["sections"][1]["items"][2]["type"] == "정량"


def test_inactive_items_are_left_out():
    categories, items = _layout()
    items[0]["is_active"] = False
    sheet = build_score_sheet(categories, items)
    assert sheet["sections"][0]["points"] == 15
    assert sheet["totalPoints"] == 35


def test_fill_marks_preset_items_read_only():
    sheet = build_score_sheet(*_layout())
    filled = fill_score_sheet(sheet, {1: 18.0, 2: 4.0, 5: 5.0}, read_only_item_ids=[5])
    first, second = filled["sections"]
    assert first["score"] == 22.0
    assert second["items"][0]["readOnly"] is True
    assert first["items"][0]["readOnly"] is False
    assert filled["totalScore"] == 27.0
    # original sheet untouched
    assert "score" not in sheet["sections"][0]


def test_json_export_then_import_keeps_layout():
    sheet = build_score_sheet(*_layout(), title="2026 평가표")
    again = sheet_from_json(sheet_to_json(sheet))
    assert again["title"] == "2026 평가표"
    assert again["totalPoints"] == 55
    assert [s["title"] for s in again["sections"]] == ["기관수행능력", "인력운영"]
    assert [[i["points"] for i in s["items"]] for s in again["sections"]] == [[20, 5, 5, 5], [5, 5, 10]]
    assert [i["code"] for i in again["sections"][0]["items"]] == ["I1", "I2", "I3", "I4"]


def test_import_recomputes_points_and_fills_codes():
    doc = {"sections": [{"title": "A구분", "points": 999,
                         "items": [{"text": "x", "points": "3"}, {"text": "y", "points": 4, "type": "정량"}]}]}
    sheet = sheet_from_json(json.dumps(doc))
    assert sheet["totalPoints"] == 7
    assert sheet["sections"][0]["points"] == 7
    assert [i["code"] for i in sheet["sections"][0]["items"]] == ["A1", "A2"]
    assert [i["type"] for i in sheet["sections"][0]["items"]] == ["정성", "정량"]


@pytest.mark.parametrize("raw", [
    "not json",
    json.dumps({"title": "x"}),
    json.dumps({"sections": []}),
    json.dumps({"sections": [{"items": []}]}),
    json.dumps({"sections": [{"title": "a", "items": [{"points": 3}]}]}),
])
def test_import_rejects_unusable_templates(raw):
    with pytest.raises(TemplateError):
        sheet_from_json(raw)
