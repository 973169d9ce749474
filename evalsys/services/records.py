"""Persistence mapper: domain records <-> rows.

Route handlers go through these functions instead of touching the session
directly, so every write commits once and announces itself on the realtime
channel afterwards.
"""
from datetime import datetime
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from ..extensions import db, notifier
from ..models import (Admin, Evaluator, Candidate, CategoryOption, EvaluationCategory,
                      EvaluationItem, EvaluationSubmission, CandidatePresetScore, SystemConfig)
from . import scoring


def _commit(table, action, record_id=None):
    db.session.commit()
    notifier.publish(table, action, record_id)


def _assign(obj, data, fields):
    for key in fields:
        if key in data:
            setattr(obj, key, data[key])
    return obj


# ----- system config (singleton) -----

CONFIG_FIELDS = ("evaluation_title", "system_name", "description", "is_evaluation_active",
                 "allow_public_results", "evaluation_start_date", "evaluation_end_date", "max_score")


def get_config():
    """The single config row, or None before the first upsert."""
    return SystemConfig.query.order_by(SystemConfig.id.asc()).first()


def config_view():
    cfg = get_config()
    if cfg:
        return cfg.to_dict()
    return {
        "evaluationTitle": current_app.config.get("DEFAULT_EVALUATION_TITLE", "종합평가시스템"),
        "isEvaluationActive": False,
        "allowPublicResults": False,
    }


def upsert_config(data):
    cfg = get_config()
    if cfg is None:
        cfg = SystemConfig()
        db.session.add(cfg)
    _assign(cfg, data, CONFIG_FIELDS)
    _commit("system_config", "upsert", None)
    return cfg


# ----- admins -----

def get_admin_by_username(username):
    return Admin.query.filter_by(username=username).first()


def ensure_default_admin():
    username = current_app.config.get("DEFAULT_ADMIN_USERNAME", "admin")
    admin = get_admin_by_username(username)
    if admin:
        return admin
    admin = Admin(username=username, name=current_app.config.get("DEFAULT_ADMIN_NAME", "관리자"))
    admin.set_password(current_app.config.get("DEFAULT_ADMIN_PASSWORD", "admin"))
    db.session.add(admin)
    db.session.commit()
    current_app.logger.info("Created default admin account %r", username)
    return admin


# ----- evaluators -----

EVALUATOR_FIELDS = ("name", "email", "department", "is_active", "sort_order")


def list_evaluators(active_only=False):
    q = Evaluator.query
    if active_only:
        q = q.filter_by(is_active=True)
    return q.order_by(Evaluator.sort_order.asc(), Evaluator.name.asc()).all()


def get_evaluator_by_name(name):
    return Evaluator.query.filter_by(name=name).first()


def _new_evaluator(data):
    ev = _assign(Evaluator(), data, EVALUATOR_FIELDS)
    ev.set_password(data["password"])
    db.session.add(ev)
    return ev


def create_evaluator(data):
    ev = _new_evaluator(data)
    db.session.flush()
    _commit("evaluators", "insert", ev.id)
    return ev


def create_evaluators(rows):
    created = [_new_evaluator(d) for d in rows]
    _commit("evaluators", "insert")
    return created


def update_evaluator(ev, data):
    _assign(ev, data, EVALUATOR_FIELDS)
    if data.get("password"):
        ev.set_password(data["password"])
    _commit("evaluators", "update", ev.id)
    return ev


def delete_evaluator(ev):
    ev_id = ev.id
    db.session.delete(ev)
    _commit("evaluators", "delete", ev_id)


# ----- candidates -----

CANDIDATE_FIELDS = ("name", "department", "position", "category", "sub_category",
                    "description", "sort_order", "is_active")


def list_candidates(active_only=False):
    q = Candidate.query
    if active_only:
        q = q.filter_by(is_active=True)
    return q.order_by(Candidate.sort_order.asc(), Candidate.name.asc()).all()


def create_candidate(data):
    c = _assign(Candidate(), data, CANDIDATE_FIELDS)
    db.session.add(c)
    db.session.flush()
    _commit("candidates", "insert", c.id)
    return c


def create_candidates(rows):
    """Bulk insert. Rows without a sort order are appended after the current last one."""
    next_order = (db.session.query(func.max(Candidate.sort_order)).scalar() or 0) + 1
    created = []
    for data in rows:
        c = _assign(Candidate(), data, CANDIDATE_FIELDS)
        if not data.get("sort_order"):
            c.sort_order = next_order
            next_order += 1
        db.session.add(c)
        created.append(c)
    _commit("candidates", "insert")
    return created


def update_candidate(c, data):
    _assign(c, data, CANDIDATE_FIELDS)
    _commit("candidates", "update", c.id)
    return c


def delete_candidate(c):
    c_id = c.id
    db.session.delete(c)  # submissions and presets cascade
    _commit("candidates", "delete", c_id)


# ----- category options -----

OPTION_FIELDS = ("name", "type", "sort_order", "is_active")


def list_category_options(option_type=None):
    q = CategoryOption.query
    if option_type:
        q = q.filter_by(type=option_type)
    return q.order_by(CategoryOption.type.asc(), CategoryOption.sort_order.asc(), CategoryOption.id.asc()).all()


def create_category_option(data):
    opt = _assign(CategoryOption(), data, OPTION_FIELDS)
    db.session.add(opt)
    db.session.flush()
    _commit("category_options", "insert", opt.id)
    return opt


def update_category_option(opt, data):
    _assign(opt, data, OPTION_FIELDS)
    _commit("category_options", "update", opt.id)
    return opt


def delete_category_option(opt):
    opt_id = opt.id
    db.session.delete(opt)
    _commit("category_options", "delete", opt_id)


# ----- categories / items -----

CATEGORY_FIELDS = ("category_code", "category_name", "description", "sort_order", "is_active")
ITEM_FIELDS = ("category_id", "item_code", "item_name", "description", "max_score", "weight",
               "is_quantitative", "has_preset_scores", "sort_order", "is_active")


def list_categories(active_only=False):
    q = EvaluationCategory.query
    if active_only:
        q = q.filter_by(is_active=True)
    return q.order_by(EvaluationCategory.sort_order.asc(), EvaluationCategory.id.asc()).all()


def create_category(data):
    cat = _assign(EvaluationCategory(), data, CATEGORY_FIELDS)
    db.session.add(cat)
    db.session.flush()
    _commit("evaluation_categories", "insert", cat.id)
    return cat


def update_category(cat, data):
    _assign(cat, data, CATEGORY_FIELDS)
    _commit("evaluation_categories", "update", cat.id)
    return cat


def delete_category(cat):
    cat_id = cat.id
    item_ids = [i.id for i in cat.items]
    if item_ids:
        CandidatePresetScore.query.filter(
            CandidatePresetScore.evaluation_item_id.in_(item_ids)).delete(synchronize_session=False)
    db.session.delete(cat)  # items cascade
    _commit("evaluation_categories", "delete", cat_id)


def list_items(active_only=False, category_id=None):
    q = EvaluationItem.query
    if active_only:
        q = q.filter_by(is_active=True)
    if category_id is not None:
        q = q.filter_by(category_id=category_id)
    return q.order_by(EvaluationItem.sort_order.asc(), EvaluationItem.id.asc()).all()


def scorable_items():
    """Items that count toward scores: the ones the score sheet shows."""
    return scoring.scorable_items(list_items(active_only=True), list_categories(active_only=True))


def create_item(data):
    item = _assign(EvaluationItem(), data, ITEM_FIELDS)
    db.session.add(item)
    db.session.flush()
    _commit("evaluation_items", "insert", item.id)
    return item


def create_items(rows):
    created = []
    for data in rows:
        item = _assign(EvaluationItem(), data, ITEM_FIELDS)
        db.session.add(item)
        created.append(item)
    _commit("evaluation_items", "insert")
    return created


def update_item(item, data):
    _assign(item, data, ITEM_FIELDS)
    _commit("evaluation_items", "update", item.id)
    return item


def delete_item(item):
    item_id = item.id
    CandidatePresetScore.query.filter_by(evaluation_item_id=item_id).delete(synchronize_session=False)
    db.session.delete(item)
    _commit("evaluation_items", "delete", item_id)


def apply_template(sheet):
    """Replace every category and item with the layout of an imported sheet.

    Preset scores hang off items, so they are cleared too. Submissions keep
    their stored score maps; keys for removed items simply stop matching.
    """
    CandidatePresetScore.query.delete(synchronize_session=False)
    EvaluationItem.query.delete(synchronize_session=False)
    EvaluationCategory.query.delete(synchronize_session=False)
    db.session.flush()

    for s_idx, section in enumerate(sheet["sections"]):
        cat = EvaluationCategory(category_code=section.get("code") or section["id"],
                                 category_name=section["title"], sort_order=s_idx + 1,
                                 is_active=True)
        db.session.add(cat)
        db.session.flush()
        for i_idx, row in enumerate(section["items"]):
            db.session.add(EvaluationItem(
                category_id=cat.id, item_code=row["code"], item_name=row["text"],
                description=row.get("description"), max_score=row["points"],
                weight=row.get("weight", 1.0), is_quantitative=row["type"] == "정량",
                sort_order=i_idx + 1, is_active=True))
    _commit("evaluation_items", "replace")


# ----- preset scores -----

PRESET_FIELDS = ("candidate_id", "evaluation_item_id", "preset_score", "apply_preset", "notes")


def list_presets(candidate_id=None):
    q = CandidatePresetScore.query
    if candidate_id is not None:
        q = q.filter_by(candidate_id=candidate_id)
    return q.order_by(CandidatePresetScore.candidate_id.asc(), CandidatePresetScore.evaluation_item_id.asc()).all()


def upsert_preset(data):
    """One preset per (candidate, item); posting again overwrites it."""
    preset = CandidatePresetScore.query.filter_by(
        candidate_id=data["candidate_id"], evaluation_item_id=data["evaluation_item_id"]).first()
    if preset is None:
        preset = CandidatePresetScore()
        db.session.add(preset)
    _assign(preset, data, PRESET_FIELDS)
    item = db.session.get(EvaluationItem, data["evaluation_item_id"])
    if item is not None and not item.has_preset_scores:
        item.has_preset_scores = True
    db.session.flush()
    _commit("candidate_preset_scores", "upsert", preset.id)
    return preset


def update_preset(preset, data):
    _assign(preset, data, PRESET_FIELDS)
    _commit("candidate_preset_scores", "update", preset.id)
    return preset


def delete_preset(preset):
    preset_id = preset.id
    db.session.delete(preset)
    _commit("candidate_preset_scores", "delete", preset_id)


# ----- submissions -----

def get_submission(evaluator_id, candidate_id):
    return EvaluationSubmission.query.filter_by(evaluator_id=evaluator_id, candidate_id=candidate_id).first()


def list_submissions(evaluator_id=None, candidate_id=None):
    q = EvaluationSubmission.query
    if evaluator_id is not None:
        q = q.filter_by(evaluator_id=evaluator_id)
    if candidate_id is not None:
        q = q.filter_by(candidate_id=candidate_id)
    return q.all()


def save_submission(evaluator_id, candidate_id, scores, complete=False):
    """Write the single score record for (evaluator, candidate).

    Saving again overwrites scores and completion state in place; a
    temporary save after completion reopens the record. When two first
    saves race, the loser's insert turns into an update of the winner's row.
    """
    items = [scoring.ItemSpec.of(i) for i in scorable_items()]
    presets = scoring.applied_presets([scoring.PresetSpec.of(p) for p in list_presets(candidate_id)],
                                      candidate_id)

    def fill(sub):
        sub.scores = {str(k): v for k, v in scores.items()}
        sub.total_score = scoring.evaluator_total(sub.scores, items, presets)
        sub.is_completed = bool(complete)
        sub.submitted_at = datetime.utcnow() if complete else None

    sub = get_submission(evaluator_id, candidate_id)
    if sub is None:
        sub = EvaluationSubmission(evaluator_id=evaluator_id, candidate_id=candidate_id)
        fill(sub)
        db.session.add(sub)
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.info("Submission for evaluator %s / candidate %s already exists, updating",
                                    evaluator_id, candidate_id)
            sub = EvaluationSubmission.query.filter_by(evaluator_id=evaluator_id,
                                                       candidate_id=candidate_id).one()
            fill(sub)
    else:
        fill(sub)
    db.session.flush()
    _commit("evaluation_submissions", "upsert", sub.id)
    return sub


# ----- aggregate queries -----

def results_report(threshold=None):
    if threshold is None:
        threshold = current_app.config.get("PASS_THRESHOLD", scoring.DEFAULT_PASS_THRESHOLD)
    active_evaluators = list_evaluators(active_only=True)
    active_ids = {e.id for e in active_evaluators}
    submissions = [scoring.SubmissionSpec.of(s) for s in EvaluationSubmission.query.all()
                   if s.evaluator_id in active_ids]
    return scoring.build_results(
        candidates=[scoring.CandidateSpec.of(c) for c in list_candidates(active_only=True)],
        submissions=submissions,
        items=[scoring.ItemSpec.of(i) for i in scorable_items()],
        presets=[scoring.PresetSpec.of(p) for p in list_presets()],
        evaluator_count=len(active_evaluators),
        threshold=threshold,
    )


def evaluator_progress(evaluator_id):
    active_ids = [c.id for c in list_candidates(active_only=True)]
    completed = 0
    if active_ids:
        completed = EvaluationSubmission.query.filter(
            EvaluationSubmission.evaluator_id == evaluator_id,
            EvaluationSubmission.is_completed.is_(True),
            EvaluationSubmission.candidate_id.in_(active_ids)).count()
    return scoring.progress(completed, len(active_ids))


def progress_list():
    out = []
    for ev in list_evaluators(active_only=True):
        row = {"id": ev.id, "name": ev.name, "department": ev.department}
        row.update(evaluator_progress(ev.id))
        out.append(row)
    return out


def statistics():
    total_evaluators = Evaluator.query.count()
    active_evaluators = Evaluator.query.filter_by(is_active=True).count()
    total_candidates = Candidate.query.filter_by(is_active=True).count()
    report = results_report()
    completed_submissions = sum(r.completed_count for r in report.results)
    possible = active_evaluators * total_candidates
    return {
        "totalEvaluators": total_evaluators,
        "activeEvaluators": active_evaluators,
        "totalCandidates": total_candidates,
        "totalEvaluationItems": len(scorable_items()),
        "totalCategories": EvaluationCategory.query.filter_by(is_active=True).count(),
        "completionRate": round(completed_submissions / possible * 100) if possible else 0,
        "completed": sum(1 for r in report.results if r.status == scoring.COMPLETED),
        "inProgress": sum(1 for r in report.results if r.status == scoring.IN_PROGRESS),
        "notStarted": sum(1 for r in report.results if r.status == scoring.NOT_STARTED),
    }
