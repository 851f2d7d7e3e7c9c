import pytest
from django.apps import apps
from django.contrib.sites.models import Site

from accounts.signals import sync_site_domain

pytestmark = pytest.mark.django_db


def test_site_domain_follows_site_url(settings):
    settings.SITE_URL = "https://gradebook.example.org"
    sync_site_domain(sender=apps.get_app_config("accounts"))
    site = Site.objects.get(pk=settings.SITE_ID)
    assert site.domain == "gradebook.example.org"
    assert site.name == "gradebook.example.org"


def test_site_domain_ignores_other_apps(settings):
    settings.SITE_URL = "https://gradebook.example.org"
    sync_site_domain(sender=apps.get_app_config("gradebooks"))
    assert not Site.objects.filter(domain="gradebook.example.org").exists()
