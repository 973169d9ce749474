"""Categories + items -> score sheet (sections A, B, C ... with point totals).

The sheet is a view transform with no persisted state. It backs the scoring
form, the printable evaluation sheet and the JSON template file.
"""
import json

QUANTITATIVE = "정량"
QUALITATIVE = "정성"
DEFAULT_TITLE = "평가표"


def section_label(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA."""
    label = ""
    index += 1
    while index > 0:
        index, rem = divmod(index - 1, 26)
        label = chr(65 + rem) + label
    return label


def _attr(obj, name, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _sort_key(obj):
    return (_attr(obj, "sort_order") or 0, _attr(obj, "id") or 0)


def build_score_sheet(categories, items, title=DEFAULT_TITLE, include_inactive=False):
    """Group items under their category and compute point subtotals.

    Categories are ordered by (sort_order, id); so are the items inside each
    section. Categories without items are dropped so labels stay contiguous.
    """
    cats = [c for c in categories if include_inactive or _attr(c, "is_active", True)]
    cats.sort(key=_sort_key)
    by_category = {}
    for item in items:
        if not include_inactive and not _attr(item, "is_active", True):
            continue
        by_category.setdefault(_attr(item, "category_id"), []).append(item)

    sections = []
    for cat in cats:
        members = sorted(by_category.get(_attr(cat, "id"), []), key=_sort_key)
        if not members:
            continue
        rows = []
        for item in members:
            rows.append({
                "id": _attr(item, "id"),
                "code": _attr(item, "item_code"),
                "text": _attr(item, "item_name"),
                "description": _attr(item, "description"),
                "type": QUANTITATIVE if _attr(item, "is_quantitative") else QUALITATIVE,
                "points": int(_attr(item, "max_score") or 0),
                "weight": float(_attr(item, "weight") or 1),
                "hasPresetScores": bool(_attr(item, "has_preset_scores")),
            })
        sections.append({
            "id": section_label(len(sections)),
            "categoryId": _attr(cat, "id"),
            "code": _attr(cat, "category_code"),
            "title": _attr(cat, "category_name"),
            "points": sum(r["points"] for r in rows),
            "items": rows,
        })

    return {
        "title": title,
        "totalPoints": sum(s["points"] for s in sections),
        "sections": sections,
    }


def fill_score_sheet(sheet, effective_scores, read_only_item_ids=()):
    """Return a copy of ``sheet`` with a ``score`` on every item and totals.

    ``effective_scores`` maps item id to the score already resolved against
    presets (see scoring.resolve_effective_scores).
    """
    read_only = set(read_only_item_ids)
    sections = []
    for section in sheet["sections"]:
        rows = []
        for item in section["items"]:
            row = dict(item)
            row["score"] = effective_scores.get(item["id"], 0)
            row["readOnly"] = item["id"] in read_only
            rows.append(row)
        sections.append(dict(section, items=rows, score=sum(r["score"] for r in rows)))
    return dict(sheet, sections=sections, totalScore=sum(s["score"] for s in sections))


def sheet_to_json(sheet) -> str:
    """Serialize the layout part of a sheet for the template file."""
    doc = {
        "title": sheet.get("title", DEFAULT_TITLE),
        "totalPoints": sheet["totalPoints"],
        "sections": [
            {
                "id": s["id"],
                "code": s.get("code"),
                "title": s["title"],
                "points": s["points"],
                "items": [
                    {"code": i.get("code"), "text": i["text"], "type": i["type"],
                     "points": i["points"], "weight": i.get("weight", 1.0),
                     "description": i.get("description")}
                    for i in s["items"]
                ],
            }
            for s in sheet["sections"]
        ],
    }
    return json.dumps(doc, ensure_ascii=False, indent=2)


class TemplateError(ValueError):
    pass


def sheet_from_json(raw):
    """Parse a template file into a normalized sheet (points recomputed).

    Raises TemplateError when the document has no usable sections.
    """
    try:
        doc = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    except ValueError as e:
        raise TemplateError(f"template is not valid JSON: {e}") from e
    if not isinstance(doc, dict) or not isinstance(doc.get("sections"), list):
        raise TemplateError("template must contain a 'sections' list")

    sections = []
    for s_idx, s in enumerate(doc["sections"]):
        if not isinstance(s, dict) or not s.get("title"):
            raise TemplateError(f"section {s_idx + 1} has no title")
        rows = []
        for i_idx, i in enumerate(s.get("items") or []):
            if not isinstance(i, dict) or not i.get("text"):
                raise TemplateError(f"section {s_idx + 1} item {i_idx + 1} has no text")
            try:
                points = int(i.get("points") or 0)
                weight = float(i.get("weight") if i.get("weight") is not None else 1.0)
            except (TypeError, ValueError) as e:
                raise TemplateError(f"section {s_idx + 1} item {i_idx + 1}: {e}") from e
            rows.append({
                "code": i.get("code") or f"{section_label(s_idx)}{i_idx + 1}",
                "text": i["text"],
                "type": QUANTITATIVE if i.get("type") == QUANTITATIVE else QUALITATIVE,
                "points": points,
                "weight": weight,
                "description": i.get("description"),
            })
        sections.append({
            "id": section_label(s_idx),
            "code": s.get("code") or section_label(s_idx),
            "title": s["title"],
            "points": sum(r["points"] for r in rows),
            "items": rows,
        })
    if not sections:
        raise TemplateError("template has no sections")

    return {
        "title": doc.get("title") or DEFAULT_TITLE,
        "totalPoints": sum(s["points"] for s in sections),
        "sections": sections,
    }
