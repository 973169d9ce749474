"""Client-side recomputation of results for print/export.

Uses the exact same aggregation as the server, fed from API payloads.
"""
from ..services import scoring, excel


def recompute_results(api, threshold=scoring.DEFAULT_PASS_THRESHOLD):
    evaluators = [e for e in api.evaluators() if e.get("isActive")]
    active_ids = {e["id"] for e in evaluators}
    candidates = [c for c in api.candidates() if c.get("isActive")]
    items = scoring.scorable_items(api.evaluation_items(), api.categories())
    return scoring.build_results(
        candidates=[scoring.CandidateSpec.of(c) for c in candidates],
        submissions=[scoring.SubmissionSpec.of(s) for s in api.submissions()
                     if s.get("evaluatorId") in active_ids],
        items=[scoring.ItemSpec.of(i) for i in items],
        presets=[scoring.PresetSpec.of(p) for p in api.preset_scores()],
        evaluator_count=len(evaluators),
        threshold=threshold,
    )


def save_results_workbook(report, path):
    with open(path, "wb") as f:
        f.write(excel.export_results(report))
    return path
