# accounts/auth_urls.py
from django.urls import path
from . import views

app_name = "accounts"

urlpatterns = [
    path("signin/", views.signin_view, name="signin"),
    path("signup/", views.signup_view, name="signup"),
    path("signout/", views.signout_view, name="signout"),

    # OAuth provider round trip
    path("oauth/<str:provider>/", views.oauth_start, name="oauth_start"),
    path("callback/", views.oauth_callback, name="oauth_callback"),
]
