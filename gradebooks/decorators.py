import logging
from functools import wraps

from django.http import JsonResponse

from .exceptions import GradebookError

logger = logging.getLogger(__name__)


def json_errors(view_func):
    """
    Turn gradebook errors raised by a view into ``{"ok": false, "error": ...}``
    responses with the error's HTTP status. Anything else propagates.
    """
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except GradebookError as e:
            logger.info("%s %s -> %s: %s", request.method, request.path, e.status_code, e)
            return JsonResponse({"ok": False, "error": str(e)}, status=e.status_code)
    return _wrapped
