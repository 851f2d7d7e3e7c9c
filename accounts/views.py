from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import redirect
from django.urls import reverse


def home(request):
    if request.user.is_authenticated:
        return redirect(reverse("gradebooks:list"))
    return redirect("account_login")


@login_required
def me(request):
    user = request.user
    return JsonResponse(
        {
            "ok": True,
            "id": user.id,
            "email": user.email,
            "name": user.get_full_name(),
            "role": user.role,
        }
    )
