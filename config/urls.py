from django.contrib import admin
from django.urls import include, path
from accounts import views as accounts_views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("django-rq/", include("django_rq.urls")),
    path("accounts/", include("allauth.urls")),
    # app URLs
    path("", include("accounts.urls")),
    path("", accounts_views.home, name="home"),
    path("gradebooks/", include("gradebooks.urls")),
    path("queries/", include("markqueries.urls")),
]
