"""Score aggregation shared by the results API, the Excel export and the client.

Everything here is a pure function over small value objects, so the same code
runs server-side against SQLAlchemy rows and client-side against JSON payloads.
Missing data never raises: absent scores count as 0 and absent presets are
ignored.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

NOT_STARTED = "notStarted"
IN_PROGRESS = "inProgress"
COMPLETED = "completed"

DEFAULT_PASS_THRESHOLD = 70.0


def _get(obj, name, default=None):
    # accept ORM rows and plain dicts (snake or camel keys)
    if isinstance(obj, dict):
        if name in obj:
            return obj[name]
        head, *rest = name.split("_")
        return obj.get(head + "".join(p.title() for p in rest), default)
    return getattr(obj, name, default)


def _as_number(value) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class ItemSpec:
    id: int
    max_score: float
    code: Optional[str] = None

    @classmethod
    def of(cls, obj) -> "ItemSpec":
        return cls(id=int(_get(obj, "id")), max_score=_as_number(_get(obj, "max_score")),
                   code=_get(obj, "item_code"))


@dataclass(frozen=True)
class PresetSpec:
    candidate_id: int
    item_id: int
    score: float
    apply: bool = True

    @classmethod
    def of(cls, obj) -> "PresetSpec":
        return cls(candidate_id=int(_get(obj, "candidate_id")),
                   item_id=int(_get(obj, "evaluation_item_id")),
                   score=_as_number(_get(obj, "preset_score")),
                   apply=bool(_get(obj, "apply_preset", True)))


@dataclass(frozen=True)
class SubmissionSpec:
    evaluator_id: int
    candidate_id: int
    scores: Dict[str, float] = field(default_factory=dict)
    is_completed: bool = False

    @classmethod
    def of(cls, obj) -> "SubmissionSpec":
        return cls(evaluator_id=int(_get(obj, "evaluator_id")),
                   candidate_id=int(_get(obj, "candidate_id")),
                   scores=dict(_get(obj, "scores") or {}),
                   is_completed=bool(_get(obj, "is_completed", False)))


@dataclass(frozen=True)
class CandidateSpec:
    id: int
    name: str
    department: str = ""
    position: str = ""
    category: Optional[str] = None
    sub_category: Optional[str] = None
    sort_order: int = 0

    @classmethod
    def of(cls, obj) -> "CandidateSpec":
        return cls(id=int(_get(obj, "id")), name=_get(obj, "name") or "",
                   department=_get(obj, "department") or "",
                   position=_get(obj, "position") or "",
                   category=_get(obj, "category"),
                   sub_category=_get(obj, "sub_category"),
                   sort_order=int(_get(obj, "sort_order") or 0))

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "department": self.department,
                "position": self.position, "category": self.category,
                "subCategory": self.sub_category, "sortOrder": self.sort_order}


@dataclass
class CandidateResult:
    candidate: CandidateSpec
    total_score: float
    max_possible: float
    percentage: float
    evaluator_count: int
    completed_count: int
    in_progress_count: int
    average_score: float
    status: str
    rank: int = 0
    passed: bool = False

    def to_dict(self) -> dict:
        return {
            "candidate": self.candidate.to_dict(),
            "candidateId": self.candidate.id,
            "totalScore": round(self.total_score, 2),
            "maxPossible": self.max_possible,
            "percentage": round(self.percentage, 2),
            "evaluatorCount": self.evaluator_count,
            "completedEvaluations": self.completed_count,
            "inProgressEvaluations": self.in_progress_count,
            "averageScore": round(self.average_score, 2),
            "status": self.status,
            "rank": self.rank,
            "passed": self.passed,
        }


@dataclass
class TieGroup:
    percentage: float
    candidate_ids: List[int]

    def to_dict(self) -> dict:
        return {"percentage": self.percentage, "candidateIds": list(self.candidate_ids)}


@dataclass
class ResultsReport:
    results: List[CandidateResult]
    ties: List[TieGroup]
    pass_threshold: float
    max_possible: float

    @property
    def passed(self) -> List[CandidateResult]:
        return [r for r in self.results if r.passed]

    @property
    def failed(self) -> List[CandidateResult]:
        return [r for r in self.results if not r.passed]

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "ties": [t.to_dict() for t in self.ties],
            "passThreshold": self.pass_threshold,
            "maxPossible": self.max_possible,
            "summary": {
                "total": len(self.results),
                "passed": len(self.passed),
                "failed": len(self.failed),
                "completed": sum(1 for r in self.results if r.status == COMPLETED),
                "inProgress": sum(1 for r in self.results if r.status == IN_PROGRESS),
                "notStarted": sum(1 for r in self.results if r.status == NOT_STARTED),
            },
        }


def scorable_items(items, categories) -> list:
    """Active items under an active category, in the given order.

    Works on ORM rows or JSON payloads. Anything filtered out here is also
    missing from the score sheet, so it never counts toward a maximum.
    """
    live = {_get(c, "id") for c in categories if _get(c, "is_active", True)}
    return [i for i in items if _get(i, "is_active", True) and _get(i, "category_id") in live]


def max_possible(items: Iterable[ItemSpec]) -> float:
    """Sum of item max scores. Depends on the template only."""
    return float(sum(i.max_score for i in items))


def applied_presets(presets: Iterable[PresetSpec], candidate_id: int) -> Dict[int, float]:
    return {p.item_id: p.score for p in presets if p.candidate_id == candidate_id and p.apply}


def resolve_effective_scores(entered: Optional[dict], items: Iterable[ItemSpec],
                             presets: Optional[Dict[int, float]] = None) -> Dict[int, float]:
    """Per item: applied preset value, else the entered value, else 0.

    ``presets`` maps item id to the preset score already filtered to one
    candidate with ``apply_preset`` set (see :func:`applied_presets`).
    Entered scores may be keyed by item id (int or str) or by item code.
    """
    entered = entered or {}
    presets = presets or {}
    out = {}
    for item in items:
        if item.id in presets:
            out[item.id] = float(presets[item.id])
            continue
        value = entered.get(str(item.id))
        if value is None:
            value = entered.get(item.id)
        if value is None and item.code:
            value = entered.get(item.code)
        out[item.id] = _as_number(value)
    return out


def evaluator_total(entered: Optional[dict], items: Iterable[ItemSpec],
                    presets: Optional[Dict[int, float]] = None) -> float:
    items = list(items)
    return float(sum(resolve_effective_scores(entered, items, presets).values()))


def submission_status(submission: Optional[SubmissionSpec]) -> str:
    if submission is None:
        return NOT_STARTED
    return COMPLETED if submission.is_completed else IN_PROGRESS


def candidate_status(evaluator_count: int, completed: int, in_progress: int) -> str:
    if evaluator_count > 0 and completed >= evaluator_count:
        return COMPLETED
    if completed > 0 or in_progress > 0:
        return IN_PROGRESS
    return NOT_STARTED


def aggregate_candidate(candidate: CandidateSpec, submissions: Iterable[SubmissionSpec],
                        items: Iterable[ItemSpec], presets: Iterable[PresetSpec],
                        evaluator_count: int) -> CandidateResult:
    """Combine every evaluator's scores for one candidate.

    The total is the plain sum of completed evaluators' totals. The percentage
    is taken against the maximum a single evaluator can give, averaged over
    completed evaluations, so one evaluator scoring 22 of 25 yields 88.0.
    """
    items = list(items)
    ceiling = max_possible(items)
    preset_map = applied_presets(presets, candidate.id)

    total = 0.0
    completed = 0
    in_progress = 0
    for sub in submissions:
        if sub.candidate_id != candidate.id:
            continue
        if sub.is_completed:
            completed += 1
            total += evaluator_total(sub.scores, items, preset_map)
        else:
            in_progress += 1

    average = total / completed if completed else 0.0
    percentage = (average / ceiling * 100.0) if completed and ceiling > 0 else 0.0

    return CandidateResult(
        candidate=candidate,
        total_score=total,
        max_possible=ceiling,
        percentage=percentage,
        evaluator_count=evaluator_count,
        completed_count=completed,
        in_progress_count=in_progress,
        average_score=average,
        status=candidate_status(evaluator_count, completed, in_progress),
    )


def rank_results(results: Iterable[CandidateResult]) -> List[CandidateResult]:
    """Order by percentage descending and number ranks 1..n.

    Equal percentages still get sequential ranks; ties are reported
    separately by :func:`detect_ties`.
    """
    ordered = sorted(results, key=lambda r: (-r.percentage, r.candidate.sort_order,
                                             r.candidate.name, r.candidate.id))
    for idx, r in enumerate(ordered, start=1):
        r.rank = idx
    return ordered


def detect_ties(results: Iterable[CandidateResult]) -> List[TieGroup]:
    """Group candidates whose percentages match to one decimal.

    Candidates without a completed evaluation have no score yet and are left out.
    """
    groups: Dict[float, List[int]] = {}
    for r in results:
        if not r.completed_count:
            continue
        groups.setdefault(round(r.percentage, 1), []).append(r.candidate.id)
    return [TieGroup(percentage=pct, candidate_ids=ids)
            for pct, ids in sorted(groups.items(), key=lambda kv: -kv[0])
            if len(ids) > 1]


def partition_pass_fail(results: Iterable[CandidateResult],
                        threshold: float = DEFAULT_PASS_THRESHOLD
                        ) -> Tuple[List[CandidateResult], List[CandidateResult]]:
    passed, failed = [], []
    for r in results:
        r.passed = r.percentage >= threshold
        (passed if r.passed else failed).append(r)
    return passed, failed


def build_results(candidates: Iterable[CandidateSpec], submissions: Iterable[SubmissionSpec],
                  items: Iterable[ItemSpec], presets: Iterable[PresetSpec],
                  evaluator_count: int,
                  threshold: float = DEFAULT_PASS_THRESHOLD) -> ResultsReport:
    items = list(items)
    submissions = list(submissions)
    presets = list(presets)
    results = [aggregate_candidate(c, submissions, items, presets, evaluator_count)
               for c in candidates]
    ranked = rank_results(results)
    partition_pass_fail(ranked, threshold)
    return ResultsReport(results=ranked, ties=detect_ties(ranked),
                         pass_threshold=threshold, max_possible=max_possible(items))


def progress(completed: int, total: int) -> dict:
    pct = round(completed / total * 100) if total > 0 else 0
    return {"completed": completed, "total": total, "progress": pct}
