from flask import jsonify, session, current_app
from flask_login import login_user, logout_user, current_user
from . import bp
from .forms import AdminLoginForm, EvaluatorLoginForm
from ...services import records
from ...utils.decorators import admin_required, evaluator_required
from ...utils.validation import json_body, validate_payload


def _start_session(account):
    session.clear()
    session.permanent = True  # PERMANENT_SESSION_LIFETIME (24h)
    login_user(account)


@bp.post("/admin/login")
def admin_login():
    data = validate_payload(AdminLoginForm, json_body())
    admin = records.get_admin_by_username(data["username"])
    if not admin or not admin.is_active or not admin.check_password(data["password"]):
        current_app.logger.info("Admin login failed for %r", data["username"])
        return jsonify({"message": "Invalid credentials"}), 401
    _start_session(admin)
    return jsonify({"user": admin.session_view()})


@bp.post("/admin/logout")
def admin_logout():
    logout_user()
    session.clear()
    return jsonify({"message": "Logged out successfully"})


@bp.get("/admin/me")
@admin_required
def admin_me():
    return jsonify({"user": current_user.session_view()})


@bp.post("/evaluator/login")
def evaluator_login():
    data = validate_payload(EvaluatorLoginForm, json_body())
    evaluator = records.get_evaluator_by_name(data["name"])
    if not evaluator or not evaluator.is_active or not evaluator.check_password(data["password"]):
        current_app.logger.info("Evaluator login failed for %r", data["name"])
        return jsonify({"message": "Invalid credentials"}), 401
    _start_session(evaluator)
    return jsonify({"evaluator": evaluator.session_view()})


@bp.post("/evaluator/logout")
def evaluator_logout():
    logout_user()
    session.clear()
    return jsonify({"message": "Logged out successfully"})


@bp.get("/evaluator/me")
@evaluator_required
def evaluator_me():
    return jsonify({"evaluator": current_user.session_view()})
