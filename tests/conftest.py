import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from evalsys import create_app
from evalsys.extensions import db

TEMPLATE = {
    "title": "종합평가표",
    "sections": [
        {"title": "기관수행능력", "items": [
            {"text": "사업 운영 체계화", "type": "정성", "points": 20},
            {"text": "심의위원회 운영", "type": "정량", "points": 5},
            {"text": "홍보 및 대외협력", "type": "정성", "points": 5},
            {"text": "예산 집행 적정성", "type": "정량", "points": 5},
        ]},
        {"title": "인력운영", "items": [
            {"text": "총괄자 전문성", "type": "정성", "points": 5},
            {"text": "전문인력 확보", "type": "정성", "points": 5},
            {"text": "역량강화 노력", "type": "정량", "points": 10},
        ]},
    ],
}

EVALUATOR = {"name": "김평가", "department": "통계청", "password": "pass1234",
             "email": "eval@stat.go.kr"}


@pytest.fixture
def app():
    app = create_app("config.TestConfig")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    c = app.test_client()
    resp = c.post("/api/admin/login", json={"username": "admin", "password": "admin"})
    assert resp.status_code == 200
    return c


@pytest.fixture
def seeded(admin):
    """Template (55 points), two candidates and one evaluator."""
    resp = admin.post("/api/admin/template/import", json=TEMPLATE)
    assert resp.status_code == 200, resp.get_json()
    candidates = []
    for name, order in (("가나기관", 1), ("다라기관", 2)):
        resp = admin.post("/api/admin/candidates", json={
            "name": name, "department": "운영팀", "position": "팀장", "sortOrder": order})
        assert resp.status_code == 201, resp.get_json()
        candidates.append(resp.get_json())
    resp = admin.post("/api/admin/evaluators", json=EVALUATOR)
    assert resp.status_code == 201, resp.get_json()
    items = admin.get("/api/admin/evaluation-items").get_json()
    return {"candidates": candidates, "evaluator": resp.get_json(),
            "items": {i["itemCode"]: i for i in items}}


@pytest.fixture
def evaluator(app, seeded):
    c = app.test_client()
    resp = c.post("/api/evaluator/login", json={"name": EVALUATOR["name"],
                                                 "password": EVALUATOR["password"]})
    assert resp.status_code == 200
    return c
