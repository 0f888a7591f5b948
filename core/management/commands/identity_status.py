from django.conf import settings
from django.core.management.base import BaseCommand

from core.identity import create_admin_client


def _mask(value):
    if not value:
        return "(not set)"
    return f"{value[:4]}…{value[-4:]}" if len(value) > 12 else "(set)"


class Command(BaseCommand):
    help = "Show the identity backend configuration this instance will use."

    def handle(self, *args, **options):
        url = settings.SUPABASE_URL
        self.stdout.write(self.style.NOTICE(f"Identity backend: {url or '(not set)'}"))
        self.stdout.write(f"Anon key:          {_mask(settings.SUPABASE_ANON_KEY)}")
        self.stdout.write(f"Service role key:  {_mask(settings.SUPABASE_SERVICE_ROLE_KEY)}")
        self.stdout.write(f"OAuth providers:   {', '.join(settings.IDENTITY_OAUTH_PROVIDERS) or '(none)'}")
        self.stdout.write(f"Request timeout:   {settings.IDENTITY_TIMEOUT_SECONDS}s")

        if not url or not settings.SUPABASE_ANON_KEY:
            self.stdout.write(self.style.ERROR("SUPABASE_URL and SUPABASE_ANON_KEY are required."))
            return

        if create_admin_client() is None:
            self.stdout.write(self.style.WARNING("Elevated client: not configured (unused by request paths)."))
        else:
            self.stdout.write(self.style.WARNING("Elevated client: configured but unused by request paths."))

        self.stdout.write(self.style.SUCCESS("Identity configuration looks complete."))
