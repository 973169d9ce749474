from flask import jsonify, request, send_file, current_app
from io import BytesIO
from . import bp
from .forms import CandidateForm, CategoryOptionForm
from ...extensions import db
from ...models import Candidate, CategoryOption
from ...services import records, excel
from ...utils.decorators import admin_required
from ...utils.validation import json_body, validate_payload, validate_many, ValidationError

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@bp.get("/candidates/active")
def active_candidates():
    return jsonify([c.to_dict() for c in records.list_candidates(active_only=True)])


@bp.get("/admin/candidates")
@admin_required
def list_candidates():
    active = request.args.get("active")
    items = records.list_candidates(active_only=active in ("1", "true"))
    q = (request.args.get("q") or "").strip().lower()
    if q:
        items = [c for c in items
                 if q in (c.name or "").lower() or q in (c.department or "").lower()
                 or q in (c.category or "").lower()]
    return jsonify([c.to_dict() for c in items])


@bp.post("/admin/candidates")
@admin_required
def create_candidate():
    data = validate_payload(CandidateForm, json_body())
    c = records.create_candidate(data)
    return jsonify(c.to_dict()), 201


@bp.post("/admin/candidates/bulk")
@admin_required
def bulk_create_candidates():
    rows = validate_many(CandidateForm, json_body().get("candidates"), field="candidates")
    created = records.create_candidates(rows)
    return jsonify([c.to_dict() for c in created]), 201


@bp.post("/admin/candidates/import")
@admin_required
def import_candidates():
    upload = request.files.get("file")
    if not upload or not upload.filename:
        raise ValidationError({"file": ["엑셀 파일을 선택해주세요"]})
    try:
        rows = excel.candidates_from_rows(excel.read_rows(upload.read()))
    except excel.ExcelImportError as e:
        raise ValidationError({"file": [str(e)]})
    if not rows:
        raise ValidationError({"file": ["등록할 데이터가 없습니다"]})
    created = records.create_candidates(rows)
    current_app.logger.info("Imported %d candidates from %s", len(created), upload.filename)
    return jsonify({"created": len(created), "candidates": [c.to_dict() for c in created]}), 201


@bp.get("/admin/candidates/export")
@admin_required
def export_candidates():
    data = excel.export_candidates(records.list_candidates())
    return send_file(BytesIO(data), as_attachment=True, download_name="candidates.xlsx",
                     mimetype=XLSX_MIMETYPE)


@bp.get("/admin/candidates/<int:candidate_id>")
@admin_required
def get_candidate(candidate_id):
    c = db.get_or_404(Candidate, candidate_id)
    return jsonify(c.to_dict())


@bp.patch("/admin/candidates/<int:candidate_id>")
@admin_required
def update_candidate(candidate_id):
    c = db.get_or_404(Candidate, candidate_id)
    data = validate_payload(CandidateForm, json_body(), obj=c, partial=True)
    records.update_candidate(c, data)
    return jsonify(c.to_dict())


@bp.delete("/admin/candidates/<int:candidate_id>")
@admin_required
def delete_candidate(candidate_id):
    c = db.get_or_404(Candidate, candidate_id)
    records.delete_candidate(c)
    return jsonify({"message": "Candidate deleted successfully"})


# ----- category options (main/sub labels) -----

@bp.get("/admin/category-options")
@admin_required
def list_category_options():
    opts = records.list_category_options(request.args.get("type"))
    return jsonify([o.to_dict() for o in opts])


@bp.post("/admin/category-options")
@admin_required
def create_category_option():
    data = validate_payload(CategoryOptionForm, json_body())
    opt = records.create_category_option(data)
    return jsonify(opt.to_dict()), 201


@bp.patch("/admin/category-options/<int:option_id>")
@admin_required
def update_category_option(option_id):
    opt = db.get_or_404(CategoryOption, option_id)
    data = validate_payload(CategoryOptionForm, json_body(), obj=opt, partial=True)
    records.update_category_option(opt, data)
    return jsonify(opt.to_dict())


@bp.delete("/admin/category-options/<int:option_id>")
@admin_required
def delete_category_option(option_id):
    opt = db.get_or_404(CategoryOption, option_id)
    records.delete_category_option(opt)
    return jsonify({"message": "Category option deleted successfully"})
