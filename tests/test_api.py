import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from evalsys.extensions import db
from evalsys.models import EvaluationSubmission
from evalsys.services import records


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "realtime": False}


def test_admin_routes_require_login(client):
    resp = client.get("/api/admin/candidates")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Authentication required"


def test_bad_login_is_rejected(client):
    resp = client.post("/api/admin/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid credentials"


def test_admin_session_roundtrip(admin):
    me = admin.get("/api/admin/me").get_json()
    assert me["user"]["username"] == "admin"
    assert "passwordHash" not in me["user"]
    admin.post("/api/admin/logout")
    assert admin.get("/api/admin/me").status_code == 401


def test_evaluator_cannot_use_admin_routes(evaluator):
    assert evaluator.get("/api/evaluator/me").status_code == 200
    assert evaluator.get("/api/admin/results").status_code == 401


def test_candidate_validation_errors(admin):
    resp = admin.post("/api/admin/candidates", json={"name": "기관"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "Invalid input"
    assert "department" in body["errors"] and "position" in body["errors"]


def test_candidate_patch_is_partial(admin, seeded):
    cid = seeded["candidates"][0]["id"]
    resp = admin.patch(f"/api/admin/candidates/{cid}", json={"isActive": False})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["isActive"] is False
    assert body["name"] == "가나기관"
    active = admin.get("/api/candidates/active").get_json()
    assert [c["id"] for c in active] == [seeded["candidates"][1]["id"]]


def test_duplicate_evaluator_name_rejected(admin, seeded):
    resp = admin.post("/api/admin/evaluators", json={"name": "김평가", "department": "x", "password": "abcd"})
    assert resp.status_code == 400
    assert "name" in resp.get_json()["errors"]


def test_evaluator_payload_hides_password(admin, seeded):
    evs = admin.get("/api/admin/evaluators").get_json()
    assert evs[0]["name"] == "김평가"
    assert all("passwordHash" not in e for e in evs)


def test_template_endpoint_groups_sections(admin, seeded):
    sheet = admin.get("/api/admin/template").get_json()
    assert [s["points"] for s in sheet["sections"]] == [35, 20]
    assert sheet["totalPoints"] == 55


def test_inactive_category_drops_out_of_scoring(admin, evaluator, seeded):
    cats = admin.get("/api/admin/categories").get_json()
    hr = next(c for c in cats if c["categoryCode"] == "B")
    resp = admin.patch(f"/api/admin/categories/{hr['id']}", json={"isActive": False})
    assert resp.status_code == 200

    sheet = admin.get("/api/admin/template").get_json()
    assert sheet["totalPoints"] == 35

    cid = seeded["candidates"][0]["id"]
    resp = evaluator.post("/api/evaluator/evaluation/complete",
                          json={"candidateId": cid, "scores": _scores([20, 5, 5, 5])})
    assert resp.status_code == 200
    assert evaluator.get(f"/api/evaluator/evaluation/{cid}").get_json()["maxPossible"] == 35

    top = admin.get("/api/admin/results").get_json()["results"][0]
    assert top["candidateId"] == cid
    assert top["maxPossible"] == 35
    assert top["percentage"] == 100.0
    assert top["passed"] is True


def test_template_export_then_import(admin, seeded):
    resp = admin.get("/api/admin/template/export")
    assert resp.status_code == 200
    assert "attachment" in resp.headers["Content-Disposition"]
    exported = resp.data
    resp = admin.post("/api/admin/template/import", data=exported, content_type="application/json")
    assert resp.status_code == 200
    assert resp.get_json()["totalPoints"] == 55


def test_template_import_rejects_garbage(admin):
    resp = admin.post("/api/admin/template/import", data=b"{}", content_type="application/json")
    assert resp.status_code == 400
    assert "template" in resp.get_json()["errors"]


def _scores(values):
    return {code: value for code, value in zip(("A1", "A2", "A3", "A4", "B1", "B2", "B3"), values)}


def test_save_temporary_twice_keeps_one_record(app, evaluator, seeded):
    cid = seeded["candidates"][0]["id"]
    first = evaluator.post("/api/evaluator/evaluation/save-temporary",
                           json={"candidateId": cid, "scores": {"A1": 10}})
    assert first.status_code == 200
    second = evaluator.post("/api/evaluator/evaluation/save-temporary",
                            json={"candidateId": cid, "scores": {"A1": 12, "B3": 8}})
    assert second.status_code == 200
    assert second.get_json()["totalScore"] == 20
    with app.app_context():
        rows = EvaluationSubmission.query.filter_by(candidate_id=cid).all()
        assert len(rows) == 1
        assert rows[0].is_completed is False
        assert sorted(rows[0].scores.values()) == [8.0, 12.0]


def test_racing_first_saves_update_the_existing_record(app, evaluator, seeded, monkeypatch):
    cid = seeded["candidates"][0]["id"]
    resp = evaluator.post("/api/evaluator/evaluation/save-temporary",
                          json={"candidateId": cid, "scores": {"A1": 10}})
    assert resp.status_code == 200

    # the second request does not see the first one's row before inserting
    monkeypatch.setattr(records, "get_submission", lambda evaluator_id, candidate_id: None)
    resp = evaluator.post("/api/evaluator/evaluation/complete",
                          json={"candidateId": cid, "scores": {"A1": 15}})
    assert resp.status_code == 200
    assert resp.get_json()["isCompleted"] is True
    with app.app_context():
        rows = EvaluationSubmission.query.filter_by(candidate_id=cid).all()
        assert len(rows) == 1
        assert rows[0].is_completed is True
        assert rows[0].total_score == 15


def test_complete_then_results(admin, evaluator, seeded):
    cid = seeded["candidates"][0]["id"]
    scores = _scores([16, 4, 4, 4, 4, 4, 8])
    resp = evaluator.post("/api/evaluator/evaluation/complete", json={"candidateId": cid, "scores": scores})
    assert resp.status_code == 200
    assert resp.get_json()["isCompleted"] is True

    report = admin.get("/api/admin/results").get_json()
    top = report["results"][0]
    assert top["candidateId"] == cid
    assert top["totalScore"] == 44
    assert top["maxPossible"] == 55
    assert top["percentage"] == 80.0
    assert top["status"] == "completed"
    assert top["passed"] is True
    other = report["results"][1]
    assert other["status"] == "notStarted"
    assert other["percentage"] == 0
    assert other["rank"] == 2

    progress = evaluator.get("/api/evaluator/progress").get_json()
    assert progress == {"completed": 1, "total": 2, "progress": 50}


def test_temporary_save_after_complete_reopens(evaluator, seeded):
    cid = seeded["candidates"][0]["id"]
    evaluator.post("/api/evaluator/evaluation/complete", json={"candidateId": cid, "scores": {"A1": 1}})
    resp = evaluator.post("/api/evaluator/evaluation/save-temporary", json={"candidateId": cid, "scores": {"A1": 2}})
    assert resp.get_json()["isCompleted"] is False
    listing = evaluator.get("/api/evaluator/candidates").get_json()
    status = {c["id"]: c["evaluationStatus"]["status"] for c in listing}
    assert status[cid] == "inProgress"


def test_preset_score_overrides_evaluator_entry(admin, evaluator, seeded):
    cid = seeded["candidates"][0]["id"]
    a2 = seeded["items"]["A2"]["id"]
    resp = admin.post("/api/admin/preset-scores", json={
        "candidateId": cid, "evaluationItemId": a2, "presetScore": 5, "applyPreset": True})
    assert resp.status_code == 201, resp.get_json()

    form = evaluator.get(f"/api/evaluator/evaluation/{cid}").get_json()
    row = [i for i in form["sheet"]["sections"][0]["items"] if i["id"] == a2][0]
    assert row["readOnly"] is True
    assert row["score"] == 5

    resp = evaluator.post("/api/evaluator/evaluation/complete",
                          json={"candidateId": cid, "scores": {"A1": 10, "A2": 0}})
    assert resp.get_json()["totalScore"] == 15


def test_preset_cannot_exceed_item_max(admin, seeded):
    resp = admin.post("/api/admin/preset-scores", json={
        "candidateId": seeded["candidates"][0]["id"],
        "evaluationItemId": seeded["items"]["A2"]["id"], "presetScore": 6})
    assert resp.status_code == 400
    assert "preset_score" in resp.get_json()["errors"]


def test_scores_must_be_known_non_negative_numbers(evaluator, seeded):
    cid = seeded["candidates"][0]["id"]
    resp = evaluator.post("/api/evaluator/evaluation/save-temporary",
                          json={"candidateId": cid, "scores": {"A1": -1, "Z9": 3, "A2": "many"}})
    assert resp.status_code == 400
    errors = resp.get_json()["errors"]["scores"]
    assert set(errors) == {"A1", "Z9", "A2"}


def test_inactive_candidate_cannot_be_scored(admin, evaluator, seeded):
    cid = seeded["candidates"][0]["id"]
    admin.patch(f"/api/admin/candidates/{cid}", json={"isActive": False})
    resp = evaluator.post("/api/evaluator/evaluation/save-temporary", json={"candidateId": cid, "scores": {}})
    assert resp.status_code == 404


def test_closed_evaluation_blocks_saves(admin, evaluator, seeded):
    resp = admin.put("/api/admin/system-config", json={"isEvaluationActive": False})
    assert resp.status_code == 200
    cid = seeded["candidates"][0]["id"]
    resp = evaluator.post("/api/evaluator/evaluation/complete", json={"candidateId": cid, "scores": {}})
    assert resp.status_code == 403


def test_config_window_must_be_ordered(admin):
    resp = admin.put("/api/admin/system-config", json={
        "evaluationStartDate": "2026-10-20T00:00:00", "evaluationEndDate": "2026-10-19T00:00:00"})
    assert resp.status_code == 400
    assert "evaluation_end_date" in resp.get_json()["errors"]


def test_config_is_a_singleton(app, admin):
    admin.put("/api/admin/system-config", json={"evaluationTitle": "1차 평가"})
    admin.put("/api/admin/system-config", json={"systemName": "평가시스템"})
    cfg = admin.get("/api/system/config").get_json()
    assert cfg["evaluationTitle"] == "1차 평가"
    assert cfg["systemName"] == "평가시스템"
    with app.app_context():
        from evalsys.models import SystemConfig
        assert db.session.query(SystemConfig).count() == 1


def test_public_results_follow_config(client, admin, seeded):
    assert client.get("/api/results").status_code == 403
    admin.put("/api/admin/system-config", json={"allowPublicResults": True, "isEvaluationActive": True})
    resp = client.get("/api/results")
    assert resp.status_code == 200
    assert len(resp.get_json()["results"]) == 2


def test_statistics_and_progress(admin, evaluator, seeded):
    cid = seeded["candidates"][1]["id"]
    evaluator.post("/api/evaluator/evaluation/complete", json={"candidateId": cid, "scores": {"A1": 20}})
    stats = admin.get("/api/admin/statistics").get_json()
    assert stats["totalCandidates"] == 2
    assert stats["activeEvaluators"] == 1
    assert stats["totalEvaluationItems"] == 7
    assert stats["completionRate"] == 50
    rows = admin.get("/api/admin/progress").get_json()
    assert rows[0]["completed"] == 1 and rows[0]["total"] == 2


def test_admin_evaluation_sheet(admin, evaluator, seeded):
    cid = seeded["candidates"][0]["id"]
    eid = seeded["evaluator"]["id"]
    evaluator.post("/api/evaluator/evaluation/save-temporary", json={"candidateId": cid, "scores": {"B3": 7}})
    body = admin.get(f"/api/admin/evaluation-sheet/{eid}/{cid}").get_json()
    assert body["status"] == "inProgress"
    assert body["sheet"]["totalScore"] == 7
    assert body["sheet"]["sections"][1]["score"] == 7


def test_deleting_candidate_removes_submissions(app, admin, evaluator, seeded):
    cid = seeded["candidates"][0]["id"]
    evaluator.post("/api/evaluator/evaluation/save-temporary", json={"candidateId": cid, "scores": {"A1": 3}})
    assert admin.delete(f"/api/admin/candidates/{cid}").status_code == 200
    assert admin.get("/api/admin/submissions").get_json() == []


def test_events_unavailable_without_redis(client):
    resp = client.get("/api/events")
    assert resp.status_code == 503
