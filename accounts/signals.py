from django.dispatch import receiver
from django.db.models.signals import post_migrate
from django.conf import settings
from urllib.parse import urlparse
from django.contrib.sites.models import Site


@receiver(post_migrate)
def sync_site_domain(sender, **kwargs):
    if sender.name != "accounts":
        return
    site_url = getattr(settings, "SITE_URL", "")
    if not site_url:
        return
    parsed = urlparse(site_url)
    host = parsed.hostname or "example.com"
    sid = getattr(settings, "SITE_ID", 1)
    Site.objects.update_or_create(
        id=sid, defaults={"domain": host, "name": host}
    )
