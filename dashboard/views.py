# dashboard/views.py
from django.shortcuts import render

from core.session import load_session

from .base_views import protected_view
from .placeholders import COMING_FEATURES, FEATURE_CARDS


def greeting_for(auth_session) -> str:
    return f"Welcome, {auth_session.display_name}!"


# -------------------------------------------------------------------
# Landing (public)
# -------------------------------------------------------------------
def landing_view(request):
    """Public entry page; offers the dashboard when a session is stored."""
    return render(request, "landing.html", {"has_session": load_session(request) is not None})


# -------------------------------------------------------------------
# Dashboard (protected)
# -------------------------------------------------------------------
@protected_view("dashboard/index.html")
def dashboard_view(request, auth_session):
    return {
        "greeting": greeting_for(auth_session),
        "cards": FEATURE_CARDS,
        "coming_features": COMING_FEATURES,
    }
