from django.urls import path
from . import views

app_name = "markqueries"

urlpatterns = [
    path("", views.raise_query, name="raise"),
    path("mine/", views.my_queries, name="mine"),
    path("<int:query_id>/resolve/", views.resolve_query, name="resolve"),
    path("gradebook/<int:gradebook_id>/", views.gradebook_queries, name="gradebook"),
]
