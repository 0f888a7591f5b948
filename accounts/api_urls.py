# accounts/api_urls.py
from django.urls import path
from . import api_views

app_name = "auth_api"

urlpatterns = [
    path("signup", api_views.signup_api, name="signup"),
    path("session", api_views.session_api, name="session"),
    path("signout", api_views.signout_api, name="signout"),
]
