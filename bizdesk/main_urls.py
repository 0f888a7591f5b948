# bizdesk/main_urls.py
from django.urls import path, include

from dashboard.views import landing_view

# --- URL patterns ---
urlpatterns = [
    # Public landing page
    path("", landing_view, name="landing"),

    # Authentication pages and JSON endpoints
    path("auth/", include("accounts.auth_urls")),
    path("api/auth/", include("accounts.api_urls")),

    # Protected area
    path("dashboard/", include("dashboard.dashboard_urls")),
]
