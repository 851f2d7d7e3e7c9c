"""
Continuous-assessment (CA) computation.

Everything here is a pure function of components, marks and weights.
Nothing is cached or persisted: every read recomputes from the current
rows, so the bulk table and the single-trainee review always agree.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .models import ComponentType, Mark

THEORY_PASS_MARK = Decimal("50")
PRACTICAL_PASS_MARK = Decimal("60")
HUNDRED = Decimal("100")


class OverallCompetency(str, Enum):
    COMPETENT = "Competent"
    NOT_YET_COMPETENT = "Not Yet Competent"
    PENDING = "Pending"


@dataclass(frozen=True)
class PracticalResult:
    component_id: int
    percentage: Optional[Decimal]
    passed: bool


@dataclass(frozen=True)
class CAResult:
    test_avg: Optional[Decimal]
    mock_avg: Optional[Decimal]
    theory_ca: Optional[Decimal]
    theory_pass: bool
    practicals: Tuple[PracticalResult, ...] = field(default_factory=tuple)
    all_practicals_pass: bool = True
    overall: OverallCompetency = OverallCompetency.PENDING

    def as_dict(self) -> Dict[str, object]:
        return {
            "test_avg": _display(self.test_avg),
            "mock_avg": _display(self.mock_avg),
            "theory_ca": _display(self.theory_ca),
            "theory_pass": self.theory_pass,
            "practicals": [
                {
                    "component_id": p.component_id,
                    "percentage": _display(p.percentage),
                    "passed": p.passed,
                }
                for p in self.practicals
            ],
            "all_practicals_pass": self.all_practicals_pass,
            "overall": self.overall.value,
        }


def _display(value: Optional[Decimal]) -> Optional[float]:
    if value is None:
        return None
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _dec(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percentage(marks_obtained, max_marks) -> Decimal:
    return _dec(marks_obtained) / _dec(max_marks) * HUNDRED


def _average(components, marks: Mapping[int, Optional[Decimal]]) -> Optional[Decimal]:
    pcts = [
        percentage(marks[c.id], c.max_marks)
        for c in components
        if marks.get(c.id) is not None
    ]
    if not pcts:
        return None
    return sum(pcts, Decimal("0")) / len(pcts)


def compute_ca(components: Iterable, marks: Mapping[int, Optional[Decimal]], test_weight, mock_weight) -> CAResult:
    """
    CA for one trainee.

    ``components`` are objects with ``id``, ``component_type`` and
    ``max_marks``; ``marks`` maps component id to marks obtained (None
    or absent when nothing was entered). Assignment and project
    components do not contribute to the CA.
    """
    by_type: Dict[str, List] = defaultdict(list)
    for c in components:
        by_type[str(c.component_type)].append(c)

    test_avg = _average(by_type[ComponentType.TEST.value], marks)
    mock_avg = _average(by_type[ComponentType.MOCK.value], marks)

    theory_ca = None
    if test_avg is not None or mock_avg is not None:
        theory_ca = (
            (test_avg or Decimal("0")) * (_dec(test_weight) / HUNDRED)
            + (mock_avg or Decimal("0")) * (_dec(mock_weight) / HUNDRED)
        )
    theory_pass = theory_ca is not None and theory_ca >= THEORY_PASS_MARK

    practicals = []
    for c in by_type[ComponentType.PRACTICAL.value]:
        raw = marks.get(c.id)
        if raw is None:
            practicals.append(PracticalResult(c.id, None, False))
            continue
        pct = percentage(raw, c.max_marks)
        practicals.append(PracticalResult(c.id, pct, pct >= PRACTICAL_PASS_MARK))
    # Vacuously true without practical components; an unmarked practical fails.
    all_practicals_pass = all(p.passed for p in practicals)
    has_practical_marks = any(p.percentage is not None for p in practicals)

    if theory_pass and all_practicals_pass:
        overall = OverallCompetency.COMPETENT
    elif theory_ca is None and not has_practical_marks:
        overall = OverallCompetency.PENDING
    else:
        overall = OverallCompetency.NOT_YET_COMPETENT

    return CAResult(
        test_avg=test_avg,
        mock_avg=mock_avg,
        theory_ca=theory_ca,
        theory_pass=theory_pass,
        practicals=tuple(practicals),
        all_practicals_pass=all_practicals_pass,
        overall=overall,
    )


def marks_by_trainee(gradebook, trainee_id=None) -> Dict[int, Dict[int, Optional[Decimal]]]:
    qs = Mark.objects.filter(gradebook=gradebook)
    if trainee_id is not None:
        qs = qs.filter(trainee_id=trainee_id)
    out: Dict[int, Dict[int, Optional[Decimal]]] = defaultdict(dict)
    for trainee_id_, component_id, marks_obtained in qs.values_list(
        "trainee_id", "component_id", "marks_obtained"
    ):
        out[trainee_id_][component_id] = marks_obtained
    return out


def gradebook_ca(gradebook) -> Dict[int, CAResult]:
    """CA for every enrolled trainee, keyed by trainee id."""
    components = list(gradebook.components.all())
    marks = marks_by_trainee(gradebook)
    trainee_ids = gradebook.enrollments.values_list("trainee_id", flat=True)
    return {
        tid: compute_ca(components, marks.get(tid, {}), gradebook.test_weight, gradebook.mock_weight)
        for tid in trainee_ids
    }


def trainee_ca(gradebook, trainee_id) -> CAResult:
    components = list(gradebook.components.all())
    marks = marks_by_trainee(gradebook, trainee_id)
    return compute_ca(components, marks.get(trainee_id, {}), gradebook.test_weight, gradebook.mock_weight)
