from datetime import datetime
from flask import jsonify, current_app
from flask_login import current_user
from . import bp
from .forms import ScoreSubmissionForm
from ...extensions import db
from ...models import Candidate
from ...services import records, scoring
from ...services.template import build_score_sheet, fill_score_sheet
from ...utils.decorators import evaluator_required
from ...utils.validation import json_body, validate_payload, ValidationError


def clean_scores(raw, items):
    """Normalize a scores map to {str(item id): float}.

    Keys may be item ids or item codes. Values must be non-negative numbers;
    staying under an item's max score is the form's job, not the server's.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError({"scores": ["An object of item scores is required."]})
    by_id = {str(i.id): i for i in items}
    by_code = {i.item_code: i for i in items}
    cleaned, errors = {}, {}
    for key, value in raw.items():
        item = by_id.get(str(key)) or by_code.get(key)
        if item is None:
            errors[str(key)] = ["Unknown evaluation item."]
            continue
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            errors[str(key)] = ["Not a valid number."]
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            errors[str(key)] = ["Not a valid number."]
            continue
        if number < 0:
            errors[str(key)] = ["Score must not be negative."]
            continue
        cleaned[str(item.id)] = number
    if errors:
        raise ValidationError({"scores": errors})
    return cleaned


def _ensure_evaluation_open():
    cfg = records.get_config()
    if cfg is None:
        return None
    if not cfg.is_evaluation_active:
        return jsonify({"message": "Evaluation is not active"}), 403
    now = datetime.utcnow()
    if cfg.evaluation_start_date and now < cfg.evaluation_start_date:
        return jsonify({"message": "Evaluation period has not started"}), 403
    if cfg.evaluation_end_date and now > cfg.evaluation_end_date:
        return jsonify({"message": "Evaluation period has ended"}), 403
    return None


def _active_candidate_or_404(candidate_id):
    c = db.get_or_404(Candidate, candidate_id)
    if not c.is_active:
        return None
    return c


@bp.get("/evaluator/candidates")
@evaluator_required
def my_candidates():
    subs = {s.candidate_id: s for s in records.list_submissions(evaluator_id=current_user.id)}
    out = []
    for c in records.list_candidates(active_only=True):
        sub = subs.get(c.id)
        status = scoring.submission_status(scoring.SubmissionSpec.of(sub) if sub else None)
        row = c.to_dict()
        row["evaluationStatus"] = {
            "status": status,
            "isCompleted": status == scoring.COMPLETED,
            "hasTemporarySave": status == scoring.IN_PROGRESS,
            "totalScore": sub.total_score if sub else 0,
            "updatedAt": sub.updated_at.isoformat() if sub and sub.updated_at else None,
        }
        out.append(row)
    return jsonify(out)


@bp.get("/evaluator/progress")
@evaluator_required
def my_progress():
    return jsonify(records.evaluator_progress(current_user.id))


@bp.get("/evaluator/evaluation/<int:candidate_id>")
@evaluator_required
def get_evaluation(candidate_id):
    c = _active_candidate_or_404(candidate_id)
    if c is None:
        return jsonify({"message": "Candidate is not active"}), 404
    items = records.scorable_items()
    sheet = build_score_sheet(records.list_categories(active_only=True), items)
    presets = scoring.applied_presets([scoring.PresetSpec.of(p) for p in records.list_presets(c.id)], c.id)
    sub = records.get_submission(current_user.id, c.id)
    entered = sub.scores if sub else {}
    effective = scoring.resolve_effective_scores(entered, [scoring.ItemSpec.of(i) for i in items], presets)
    return jsonify({
        "candidate": c.to_dict(),
        "sheet": fill_score_sheet(sheet, effective, read_only_item_ids=presets.keys()),
        "scores": entered,
        "presetScores": {str(k): v for k, v in presets.items()},
        "isCompleted": bool(sub and sub.is_completed),
        "status": scoring.submission_status(scoring.SubmissionSpec.of(sub) if sub else None),
        "totalScore": sum(effective.values()),
        "maxPossible": sheet["totalPoints"],
    })


def _save(complete):
    closed = _ensure_evaluation_open()
    if closed:
        return closed
    body = json_body()
    data = validate_payload(ScoreSubmissionForm, body)
    c = _active_candidate_or_404(data["candidate_id"])
    if c is None:
        return jsonify({"message": "Candidate is not active"}), 404
    scores = clean_scores(body.get("scores"), records.scorable_items())
    sub = records.save_submission(current_user.id, c.id, scores, complete=complete)
    current_app.logger.info("Evaluator %s %s candidate %s (total %.1f)", current_user.id,
                            "completed" if complete else "saved", c.id, sub.total_score)
    return jsonify(sub.to_dict())


@bp.post("/evaluator/evaluation/save-temporary")
@evaluator_required
def save_temporary():
    return _save(complete=False)


@bp.post("/evaluator/evaluation/complete")
@evaluator_required
def complete():
    return _save(complete=True)
