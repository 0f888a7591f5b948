# dashboard/context_processors.py
from django.urls import reverse


def site_navigation(request):
    """Links every page template uses (header, sign-out form)."""
    return {
        "site_name": "BizDesk",
        "nav": {
            "home": "/",
            "signin": reverse("accounts:signin"),
            "signup": reverse("accounts:signup"),
            "signout": reverse("accounts:signout"),
            "dashboard": reverse("dashboard:index"),
        },
    }
