from io import BytesIO
from datetime import datetime
from flask import jsonify, request, send_file
from . import bp
from ...extensions import db
from ...models import Candidate, Evaluator
from ...services import records, scoring, excel
from ...services.template import build_score_sheet, fill_score_sheet
from ...utils.decorators import admin_required
from ..candidates.routes import XLSX_MIMETYPE


def _threshold():
    return request.args.get("threshold", type=float)


@bp.get("/admin/results")
@admin_required
def admin_results():
    return jsonify(records.results_report(_threshold()).to_dict())


@bp.get("/results")
def public_results():
    cfg = records.get_config()
    if not cfg or not cfg.allow_public_results:
        return jsonify({"message": "Public results are not available"}), 403
    return jsonify(records.results_report().to_dict())


@bp.get("/admin/export-results")
@admin_required
def export_results():
    data = excel.export_results(records.results_report(_threshold()))
    name = f"evaluation-results-{datetime.now():%Y%m%d}.xlsx"
    return send_file(BytesIO(data), as_attachment=True, download_name=name, mimetype=XLSX_MIMETYPE)


@bp.get("/admin/statistics")
@admin_required
def statistics():
    return jsonify(records.statistics())


@bp.get("/admin/progress")
@admin_required
def progress():
    return jsonify(records.progress_list())


@bp.get("/admin/evaluation-sheet/<int:evaluator_id>/<int:candidate_id>")
@admin_required
def evaluation_sheet(evaluator_id, candidate_id):
    """Filled score sheet for printing one evaluator's form for one candidate."""
    ev = db.get_or_404(Evaluator, evaluator_id)
    c = db.get_or_404(Candidate, candidate_id)
    items = records.scorable_items()
    cfg = records.get_config()
    sheet = build_score_sheet(records.list_categories(active_only=True), items,
                              title=f"{c.name} {cfg.evaluation_title if cfg else '평가표'}")
    presets = scoring.applied_presets([scoring.PresetSpec.of(p) for p in records.list_presets(c.id)], c.id)
    sub = records.get_submission(ev.id, c.id)
    effective = scoring.resolve_effective_scores(sub.scores if sub else {},
                                                 [scoring.ItemSpec.of(i) for i in items], presets)
    return jsonify({
        "evaluator": ev.session_view(),
        "candidate": c.to_dict(),
        "status": scoring.submission_status(scoring.SubmissionSpec.of(sub) if sub else None),
        "sheet": fill_score_sheet(sheet, effective, read_only_item_ids=presets.keys()),
    })


@bp.get("/admin/submissions")
@admin_required
def list_submissions():
    evaluator_id = request.args.get("evaluatorId", type=int)
    candidate_id = request.args.get("candidateId", type=int)
    subs = records.list_submissions(evaluator_id=evaluator_id, candidate_id=candidate_id)
    return jsonify([s.to_dict() for s in subs])
