from django.db.models import Q
from .models import Trainee


def find_matching_trainees(qualification, level=None):
    """
    Active trainees registered against a qualification.

    A trainee matches on the qualification itself or, when the
    qualification names a trade, on that trade. If the qualification
    carries an NQF level, ``level`` must also match the trainee's level.
    """
    if qualification is None:
        return Trainee.objects.none()
    match = Q(qualification=qualification)
    if qualification.trade:
        match |= Q(trade__iexact=qualification.trade)
    qs = Trainee.objects.filter(match, status="active")
    if qualification.nqf_level is not None and level is not None:
        qs = qs.filter(level=level)
    return qs.order_by("last_name", "first_name", "id")


def trainee_for_user(user):
    if not getattr(user, "is_authenticated", False):
        return None
    return Trainee.objects.filter(user=user).first()
