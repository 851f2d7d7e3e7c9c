from dataclasses import asdict, dataclass
from typing import Dict, Optional

from .exceptions import NotFoundError, ValidationError
from .models import CompetencyStatus
from .permissions import ActorContext
from .services import save_mark

SESSION_KEY_PREFIX = "gradebook_edits"


def _cell_id(value, label) -> int:
    # int() would accept "2_3" as 23.
    text = str(value).strip()
    if not text.isdecimal():
        raise ValidationError(f"{label} must be a whole number")
    return int(text)


def cell_key(component_id, trainee_id) -> str:
    return f"{_cell_id(component_id, 'component_id')}_{_cell_id(trainee_id, 'trainee_id')}"


def parse_cell_key(key: str):
    parts = str(key).split("_")
    if len(parts) != 2 or not all(p.isdecimal() for p in parts):
        raise ValidationError(f"malformed cell key '{key}'")
    return int(parts[0]), int(parts[1])


@dataclass
class StagedEdit:
    marks: Optional[str] = None
    competency: str = CompetencyStatus.PENDING.value
    feedback: str = ""


class StagedEdits:
    """
    Pending, uncommitted cell edits for one gradebook, keyed
    ``"<component_id>_<trainee_id>"``. Edits are only dropped once their
    commit has succeeded.
    """

    def __init__(self, gradebook_id, edits: Optional[Dict[str, StagedEdit]] = None):
        self.gradebook_id = gradebook_id
        self.edits: Dict[str, StagedEdit] = dict(edits or {})

    def __contains__(self, key):
        return key in self.edits

    def __len__(self):
        return len(self.edits)

    def get(self, key) -> Optional[StagedEdit]:
        return self.edits.get(key)

    def stage(self, component_id, trainee_id, marks=None, competency=None, feedback=None) -> StagedEdit:
        key = cell_key(component_id, trainee_id)
        edit = self.edits.get(key) or StagedEdit()
        if marks is not None:
            edit.marks = str(marks)
        if competency is not None:
            if competency not in CompetencyStatus.values:
                raise ValidationError(f"unknown competency status '{competency}'")
            edit.competency = str(competency)
        if feedback is not None:
            edit.feedback = feedback
        self.edits[key] = edit
        return edit

    def discard(self, key) -> None:
        self.edits.pop(key, None)

    def commit(self, key, actor: ActorContext):
        edit = self.edits.get(key)
        if edit is None:
            raise NotFoundError(f"no staged edit for cell '{key}'")
        component_id, trainee_id = parse_cell_key(key)
        mark = save_mark(
            actor,
            self.gradebook_id,
            component_id,
            trainee_id,
            marks_obtained=edit.marks,
            competency_status=edit.competency,
            feedback_text=edit.feedback or None,
        )
        del self.edits[key]
        return mark

    def commit_all(self, actor: ActorContext):
        """Commit every staged cell in key order; stops at the first failure."""
        return [self.commit(key, actor) for key in sorted(self.edits)]

    def to_dict(self) -> Dict[str, Dict]:
        return {key: asdict(edit) for key, edit in self.edits.items()}

    @classmethod
    def from_dict(cls, gradebook_id, data) -> "StagedEdits":
        return cls(gradebook_id, {key: StagedEdit(**value) for key, value in (data or {}).items()})

    @classmethod
    def from_session(cls, session, gradebook_id) -> "StagedEdits":
        return cls.from_dict(gradebook_id, session.get(f"{SESSION_KEY_PREFIX}:{gradebook_id}"))

    def save_to_session(self, session) -> None:
        key = f"{SESSION_KEY_PREFIX}:{self.gradebook_id}"
        if self.edits:
            session[key] = self.to_dict()
        else:
            session.pop(key, None)
