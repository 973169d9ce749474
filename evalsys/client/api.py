"""Thin HTTP client for the evaluation API (cookie session via requests)."""
import logging
import requests

log = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status, message, errors=None):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.errors = errors or {}


def clamp_scores(scores, items):
    """Clamp entered scores into [0, max_score] per item before submitting.

    ``items`` are item payloads (``id``, ``maxScore``). Unknown keys are left
    for the server to reject.
    """
    limits = {str(i["id"]): float(i.get("maxScore") or 0) for i in items}
    out = {}
    for key, value in scores.items():
        if value is None or value == "":
            continue
        number = float(value)
        limit = limits.get(str(key))
        if limit is not None:
            number = min(max(number, 0.0), limit)
        out[str(key)] = number
    return out


class ApiClient:
    def __init__(self, base_url, session=None, timeout=10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def url(self, path):
        return f"{self.base_url}{path}"

    def request(self, method, path, json=None, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        headers = kwargs.pop("headers", {})
        if method == "GET":
            headers.setdefault("Cache-Control", "no-cache")
        resp = self.session.request(method, self.url(path), json=json, headers=headers, **kwargs)
        if not resp.ok:
            try:
                body = resp.json()
            except ValueError:
                body = {"message": resp.text or resp.reason}
            log.debug("%s %s -> %s %s", method, path, resp.status_code, body)
            raise ApiError(resp.status_code, body.get("message", resp.reason), body.get("errors"))
        if resp.headers.get("Content-Type", "").startswith("application/json"):
            return resp.json()
        return resp.content

    def get(self, path, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path, json=None, **kwargs):
        return self.request("POST", path, json=json, **kwargs)

    def patch(self, path, json=None, **kwargs):
        return self.request("PATCH", path, json=json, **kwargs)

    def delete(self, path, **kwargs):
        return self.request("DELETE", path, **kwargs)

    # auth
    def login_admin(self, username, password):
        return self.post("/api/admin/login", {"username": username, "password": password})

    def login_evaluator(self, name, password):
        return self.post("/api/evaluator/login", {"name": name, "password": password})

    # admin resources
    def candidates(self):
        return self.get("/api/admin/candidates")

    def set_candidate_active(self, candidate_id, is_active):
        return self.patch(f"/api/admin/candidates/{candidate_id}", {"isActive": is_active})

    def evaluators(self):
        return self.get("/api/admin/evaluators")

    def categories(self):
        return self.get("/api/admin/categories")

    def evaluation_items(self):
        return self.get("/api/admin/evaluation-items")

    def preset_scores(self):
        return self.get("/api/admin/preset-scores")

    def submissions(self):
        return self.get("/api/admin/submissions")

    def results(self):
        return self.get("/api/admin/results")

    # evaluator
    def evaluation(self, candidate_id):
        return self.get(f"/api/evaluator/evaluation/{candidate_id}")

    def save_temporary(self, candidate_id, scores):
        return self.post("/api/evaluator/evaluation/save-temporary",
                         {"candidateId": candidate_id, "scores": scores})

    def complete(self, candidate_id, scores):
        return self.post("/api/evaluator/evaluation/complete",
                         {"candidateId": candidate_id, "scores": scores})

    def events(self):
        """Open the server-sent change stream; the caller closes the response."""
        resp = self.session.get(self.url("/api/events"), stream=True,
                                timeout=(self.timeout, None))
        if not resp.ok:
            resp.close()
            raise ApiError(resp.status_code, "Realtime channel unavailable")
        return resp
