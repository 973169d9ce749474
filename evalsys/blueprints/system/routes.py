from flask import jsonify
from . import bp
from .forms import SystemConfigForm
from ...services import records
from ...utils.decorators import admin_required
from ...utils.validation import json_body, validate_payload


@bp.get("/system/config")
def public_config():
    return jsonify(records.config_view())


@bp.get("/admin/system-config")
@admin_required
def admin_config():
    return jsonify(records.config_view())


@bp.put("/admin/system-config")
@admin_required
def update_config():
    data = validate_payload(SystemConfigForm, json_body(), obj=records.get_config(), partial=True)
    cfg = records.upsert_config(data)
    return jsonify(cfg.to_dict())
