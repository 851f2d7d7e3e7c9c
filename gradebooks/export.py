import csv
import io
from decimal import Decimal

from .exceptions import StateError
from .models import GradebookStatus
from .permissions import ActorContext, Role, require_role

IDENTITY_HEADERS = ["Trainee ID", "First Name", "Last Name"]
TRAILING_HEADERS = ["Assessor Name", "Exam Date"]


def _max_label(max_marks) -> str:
    # 100.00 -> "100", 12.50 -> "12.5"
    return format(Decimal(str(max_marks)).normalize(), "f")


def assessor_header(gradebook):
    components = list(gradebook.components.all())
    return IDENTITY_HEADERS + [f"{c.name} (/{_max_label(c.max_marks)})" for c in components] + TRAILING_HEADERS


def assessor_csv(gradebook, actor: ActorContext) -> str:
    """
    Blank score sheet for external assessors: one row per enrolled trainee.
    Only an assessment coordinator may export, and only once HoT approved.
    """
    require_role(actor, Role.ASSESSMENT_COORDINATOR, action="export the assessor sheet")
    if gradebook.status != GradebookStatus.HOT_APPROVED:
        raise StateError("the assessor sheet is only available for HoT-approved gradebooks")
    header = assessor_header(gradebook)
    blanks = [""] * (len(header) - len(IDENTITY_HEADERS))
    enrollments = gradebook.enrollments.select_related("trainee").order_by(
        "trainee__last_name", "trainee__first_name", "trainee_id"
    )
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(header)
    for e in enrollments:
        t = e.trainee
        writer.writerow([t.trainee_number, t.first_name, t.last_name, *blanks])
    return out.getvalue()


def export_filename(gradebook) -> str:
    code = getattr(gradebook.qualification, "code", "") or "gradebook"
    return f"assessor-sheet-{code}-{gradebook.academic_year}.csv".replace(" ", "-")
