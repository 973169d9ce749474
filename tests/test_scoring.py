import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from evalsys.services import scoring
from evalsys.services.scoring import (CandidateSpec, ItemSpec, PresetSpec, SubmissionSpec,
                                      aggregate_candidate, build_results)

ITEMS = [ItemSpec(id=1, max_score=20, code="A1"), ItemSpec(id=2, max_score=5, code="A2")]


def _candidate(cid, name=None, order=0):
    return CandidateSpec(id=cid, name=name or f"c{cid}", sort_order=order)


def test_no_completed_evaluations_gives_zero_percentage():
    subs = [SubmissionSpec(evaluator_id=1, candidate_id=1, scores={"1": 18}, is_completed=False)]
    r = aggregate_candidate(_candidate(1), subs, ITEMS, [], evaluator_count=2)
    assert r.percentage == 0
    assert r.total_score == 0
    assert r.status == scoring.IN_PROGRESS
    assert r.in_progress_count == 1


def test_single_completed_evaluation_percentage():
    subs = [SubmissionSpec(evaluator_id=1, candidate_id=1, scores={"1": 18, "2": 4}, is_completed=True)]
    r = aggregate_candidate(_candidate(1), subs, ITEMS, [], evaluator_count=1)
    assert r.total_score == 22
    assert r.max_possible == 25
    assert r.percentage == 88.0
    assert r.status == scoring.COMPLETED


def test_percentage_is_averaged_over_completed_evaluators():
    subs = [
        SubmissionSpec(evaluator_id=1, candidate_id=1, scores={"1": 20, "2": 5}, is_completed=True),
        SubmissionSpec(evaluator_id=2, candidate_id=1, scores={"1": 15, "2": 5}, is_completed=True),
    ]
    r = aggregate_candidate(_candidate(1), subs, ITEMS, [], evaluator_count=3)
    assert r.total_score == 45
    assert r.average_score == 22.5
    assert r.percentage == 90.0
    assert r.status == scoring.IN_PROGRESS


def test_applied_preset_overrides_entered_score():
    presets = [PresetSpec(candidate_id=1, item_id=2, score=5, apply=True)]
    effective = scoring.resolve_effective_scores({"1": 10, "2": 1}, ITEMS,
                                                 scoring.applied_presets(presets, 1))
    assert effective == {1: 10.0, 2: 5.0}


def test_preset_not_applied_or_for_other_candidate_is_ignored():
    presets = [PresetSpec(candidate_id=1, item_id=2, score=5, apply=False),
               PresetSpec(candidate_id=9, item_id=1, score=20)]
    assert scoring.applied_presets(presets, 1) == {}


def test_entered_scores_may_use_codes_and_bad_values_count_as_zero():
    effective = scoring.resolve_effective_scores({"A1": "12", 2: "abc"}, ITEMS)
    assert effective == {1: 12.0, 2: 0.0}


def test_ties_share_a_group_but_ranks_stay_sequential():
    items = [ItemSpec(id=1, max_score=20)]
    subs = [
        SubmissionSpec(evaluator_id=1, candidate_id=1, scores={"1": 17}, is_completed=True),
        SubmissionSpec(evaluator_id=1, candidate_id=2, scores={"1": 17}, is_completed=True),
        SubmissionSpec(evaluator_id=1, candidate_id=3, scores={"1": 10}, is_completed=True),
    ]
    report = build_results([_candidate(1, "b", 2), _candidate(2, "a", 1), _candidate(3)],
                           subs, items, [], evaluator_count=1)
    assert [r.percentage for r in report.results] == [85.0, 85.0, 50.0]
    assert [r.rank for r in report.results] == [1, 2, 3]
    # equal percentage falls back to sort order
    assert [r.candidate.id for r in report.results[:2]] == [2, 1]
    assert len(report.ties) == 1
    assert report.ties[0].percentage == 85.0
    assert sorted(report.ties[0].candidate_ids) == [1, 2]


def test_unscored_candidates_are_not_reported_as_tied():
    items = [ItemSpec(id=1, max_score=20)]
    subs = [
        SubmissionSpec(evaluator_id=1, candidate_id=1, scores={"1": 0}, is_completed=True),
        SubmissionSpec(evaluator_id=1, candidate_id=2, scores={"1": 5}, is_completed=False),
    ]
    report = build_results([_candidate(1), _candidate(2), _candidate(3)],
                           subs, items, [], evaluator_count=1)
    assert [r.percentage for r in report.results] == [0.0, 0.0, 0.0]
    assert report.ties == []


def test_scorable_items_skip_inactive_categories():
    categories = [{"id": 1, "isActive": True}, {"id": 2, "isActive": False}]
    items = [{"id": 1, "categoryId": 1, "isActive": True},
             {"id": 2, "categoryId": 2, "isActive": True},
             {"id": 3, "categoryId": 1, "isActive": False},
             {"id": 4, "categoryId": 9, "isActive": True}]
    assert [i["id"] for i in scoring.scorable_items(items, categories)] == [1]


def test_pass_fail_partition_uses_threshold_inclusive():
    items = [ItemSpec(id=1, max_score=10)]
    subs = [
        SubmissionSpec(evaluator_id=1, candidate_id=1, scores={"1": 7}, is_completed=True),
        SubmissionSpec(evaluator_id=1, candidate_id=2, scores={"1": 6}, is_completed=True),
    ]
    report = build_results([_candidate(1), _candidate(2)], subs, items, [], evaluator_count=1,
                           threshold=70)
    assert [r.candidate.id for r in report.passed] == [1]
    assert [r.candidate.id for r in report.failed] == [2]
    summary = report.to_dict()["summary"]
    assert summary["passed"] == 1 and summary["failed"] == 1


def test_candidate_status_values():
    assert scoring.candidate_status(2, 0, 0) == scoring.NOT_STARTED
    assert scoring.candidate_status(2, 1, 0) == scoring.IN_PROGRESS
    assert scoring.candidate_status(2, 0, 1) == scoring.IN_PROGRESS
    assert scoring.candidate_status(2, 2, 0) == scoring.COMPLETED
    assert scoring.candidate_status(0, 0, 0) == scoring.NOT_STARTED


def test_specs_accept_camel_case_payloads():
    sub = SubmissionSpec.of({"evaluatorId": 3, "candidateId": 4, "scores": {"1": 2}, "isCompleted": True})
    assert (sub.evaluator_id, sub.candidate_id, sub.is_completed) == (3, 4, True)
    item = ItemSpec.of({"id": 7, "maxScore": 15, "itemCode": "B2"})
    assert item == ItemSpec(id=7, max_score=15.0, code="B2")
    preset = PresetSpec.of({"candidateId": 1, "evaluationItemId": 7, "presetScore": 3, "applyPreset": False})
    assert preset.apply is False


def test_progress_rounds_and_handles_empty():
    assert scoring.progress(1, 3) == {"completed": 1, "total": 3, "progress": 33}
    assert scoring.progress(0, 0)["progress"] == 0
