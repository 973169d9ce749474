from flask import jsonify, request, Response
from . import bp
from .forms import CategoryForm, EvaluationItemForm, PresetScoreForm
from ...extensions import db
from ...models import Candidate, EvaluationCategory, EvaluationItem, CandidatePresetScore
from ...services import records
from ...services.template import build_score_sheet, sheet_to_json, sheet_from_json, TemplateError
from ...utils.decorators import admin_required
from ...utils.validation import json_body, validate_payload, validate_many, ValidationError


def _check_category(category_id):
    if db.session.get(EvaluationCategory, category_id) is None:
        raise ValidationError({"category_id": ["존재하지 않는 구분입니다"]})


def _check_preset_refs(data):
    errors = {}
    if "candidate_id" in data and db.session.get(Candidate, data["candidate_id"]) is None:
        errors["candidate_id"] = ["존재하지 않는 평가대상입니다"]
    if "evaluation_item_id" in data:
        item = db.session.get(EvaluationItem, data["evaluation_item_id"])
        if item is None:
            errors["evaluation_item_id"] = ["존재하지 않는 평가항목입니다"]
        elif "preset_score" in data and data["preset_score"] > item.max_score:
            errors["preset_score"] = [f"배점({item.max_score})을 초과할 수 없습니다"]
    if errors:
        raise ValidationError(errors)


def current_sheet():
    cfg = records.get_config()
    title = cfg.evaluation_title if cfg else None
    return build_score_sheet(records.list_categories(active_only=True),
                             records.scorable_items(),
                             title=title or "평가표")


# ----- categories -----

@bp.get("/admin/categories")
@admin_required
def list_categories():
    active = request.args.get("active") in ("1", "true")
    return jsonify([c.to_dict() for c in records.list_categories(active_only=active)])


@bp.post("/admin/categories")
@admin_required
def create_category():
    data = validate_payload(CategoryForm, json_body())
    cat = records.create_category(data)
    return jsonify(cat.to_dict()), 201


@bp.patch("/admin/categories/<int:category_id>")
@admin_required
def update_category(category_id):
    cat = db.get_or_404(EvaluationCategory, category_id)
    data = validate_payload(CategoryForm, json_body(), obj=cat, partial=True)
    records.update_category(cat, data)
    return jsonify(cat.to_dict())


@bp.delete("/admin/categories/<int:category_id>")
@admin_required
def delete_category(category_id):
    cat = db.get_or_404(EvaluationCategory, category_id)
    records.delete_category(cat)
    return jsonify({"message": "Category deleted successfully"})


# ----- evaluation items -----

@bp.get("/admin/evaluation-items")
@admin_required
def list_items():
    active = request.args.get("active") in ("1", "true")
    category_id = request.args.get("categoryId", type=int)
    return jsonify([i.to_dict() for i in records.list_items(active_only=active, category_id=category_id)])


@bp.post("/admin/evaluation-items")
@admin_required
def create_item():
    data = validate_payload(EvaluationItemForm, json_body())
    _check_category(data["category_id"])
    item = records.create_item(data)
    return jsonify(item.to_dict()), 201


@bp.post("/admin/evaluation-items/bulk")
@admin_required
def bulk_create_items():
    rows = validate_many(EvaluationItemForm, json_body().get("items"), field="items")
    for row in rows:
        _check_category(row["category_id"])
    created = records.create_items(rows)
    return jsonify([i.to_dict() for i in created]), 201


@bp.patch("/admin/evaluation-items/<int:item_id>")
@admin_required
def update_item(item_id):
    item = db.get_or_404(EvaluationItem, item_id)
    data = validate_payload(EvaluationItemForm, json_body(), obj=item, partial=True)
    if "category_id" in data:
        _check_category(data["category_id"])
    records.update_item(item, data)
    return jsonify(item.to_dict())


@bp.delete("/admin/evaluation-items/<int:item_id>")
@admin_required
def delete_item(item_id):
    item = db.get_or_404(EvaluationItem, item_id)
    records.delete_item(item)
    return jsonify({"message": "Evaluation item deleted successfully"})


# ----- score sheet template -----

@bp.get("/admin/template")
@admin_required
def get_template():
    return jsonify(current_sheet())


@bp.get("/admin/template/export")
@admin_required
def export_template():
    body = sheet_to_json(current_sheet())
    return Response(body, mimetype="application/json",
                    headers={"Content-Disposition": "attachment; filename=evaluation-template.json"})


@bp.post("/admin/template/import")
@admin_required
def import_template():
    upload = request.files.get("file")
    raw = upload.read() if upload else request.get_data()
    try:
        sheet = sheet_from_json(raw)
    except TemplateError as e:
        raise ValidationError({"template": [str(e)]})
    records.apply_template(sheet)
    return jsonify(current_sheet())


# ----- preset scores -----

@bp.get("/admin/preset-scores")
@admin_required
def list_presets():
    candidate_id = request.args.get("candidateId", type=int)
    return jsonify([p.to_dict() for p in records.list_presets(candidate_id)])


@bp.post("/admin/preset-scores")
@admin_required
def upsert_preset():
    data = validate_payload(PresetScoreForm, json_body())
    _check_preset_refs(data)
    preset = records.upsert_preset(data)
    return jsonify(preset.to_dict()), 201


@bp.patch("/admin/preset-scores/<int:preset_id>")
@admin_required
def update_preset(preset_id):
    preset = db.get_or_404(CandidatePresetScore, preset_id)
    data = validate_payload(PresetScoreForm, json_body(), obj=preset, partial=True)
    _check_preset_refs({"evaluation_item_id": preset.evaluation_item_id, **data})
    records.update_preset(preset, data)
    return jsonify(preset.to_dict())


@bp.delete("/admin/preset-scores/<int:preset_id>")
@admin_required
def delete_preset(preset_id):
    preset = db.get_or_404(CandidatePresetScore, preset_id)
    records.delete_preset(preset)
    return jsonify({"message": "Preset score deleted successfully"})
