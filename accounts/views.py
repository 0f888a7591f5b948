# accounts/views.py
import enum
import logging
from urllib.parse import urlencode

from django.conf import settings
from django.http import Http404
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods, require_POST

from core import identity
from core.errors import GENERIC_ERROR_MESSAGE, IdentityError, InvalidCredentials, TransportError, user_message
from core.session import SessionStorage, clear_session, load_session, store_session

from . import services
from .forms import SigninForm, SignupForm

logger = logging.getLogger(__name__)

SIGNUP_REDIRECT_SECONDS = 2


class SigninState(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    ERROR = "error"
    AUTHENTICATED = "authenticated"


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _dashboard_url():
    return reverse("dashboard:index")


def _safe_next(request, default=None):
    """`next` from the query/form if it points back at this host."""
    target = request.POST.get("next") or request.GET.get("next")
    if target and url_has_allowed_host_and_scheme(
        target, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return target
    return default or _dashboard_url()


def _render_signin(request, form=None, error="", state=SigninState.IDLE):
    context = {
        "form": form or SigninForm(),
        "error": error,
        "state": state.value,
        "next": _safe_next(request),
        "oauth_providers": settings.IDENTITY_OAUTH_PROVIDERS,
    }
    return render(request, "accounts/signin.html", context)


# -------------------------------------------------------------------
# Signin view
# -------------------------------------------------------------------
@require_http_methods(["GET", "POST"])
def signin_view(request):
    """
    Credential signin.
    Wrong credentials show "Invalid credentials", every other failure
    "An error occurred"; neither navigates away.
    """
    if request.method == "GET":
        if load_session(request) is not None:
            return redirect(_safe_next(request))
        return _render_signin(request)

    form = SigninForm(request.POST)
    if not form.is_valid():
        return _render_signin(request, form, error=InvalidCredentials().user_message, state=SigninState.ERROR)

    email = form.cleaned_data["email"]
    try:
        auth_session = services.authenticate(
            identity.get_identity_backend(),
            email,
            form.cleaned_data["password"],
            cancel_token=identity.new_cancel_token(),
        )
    except InvalidCredentials as e:
        logger.warning(f"Failed signin for {email}: {e.message}")
        return _render_signin(request, form, error=user_message(e), state=SigninState.ERROR)
    except IdentityError as e:
        logger.error(f"Signin for {email} failed: {e.message}")
        return _render_signin(request, form, error=user_message(e), state=SigninState.ERROR)

    store_session(request, auth_session)
    return redirect(_safe_next(request))


# -------------------------------------------------------------------
# Signup view
# -------------------------------------------------------------------
@require_http_methods(["GET", "POST"])
def signup_view(request):
    """HTML signup; shares validation and backend call with the JSON endpoint."""
    form = SignupForm(request.POST or None)
    error = ""

    if request.method == "POST":
        if not form.is_valid():
            error = form.first_error()
        else:
            data = form.cleaned_data
            try:
                services.register_user(
                    identity.get_identity_backend(),
                    data["name"],
                    data["email"],
                    data["password"],
                    cancel_token=identity.new_cancel_token(),
                )
            except IdentityError as e:
                if isinstance(e, TransportError):
                    logger.error(f"Signup for {data['email']} failed: {e.message}")
                error = user_message(e)
            else:
                return render(request, "accounts/signup_success.html", {
                    "signin_url": reverse("accounts:signin"),
                    "redirect_seconds": SIGNUP_REDIRECT_SECONDS,
                })

    return render(request, "accounts/signup.html", {"form": form, "error": error})


# -------------------------------------------------------------------
# OAuth
# -------------------------------------------------------------------
@require_POST
def oauth_start(request, provider):
    """Send the browser to the provider; it comes back to oauth_callback."""
    if provider not in settings.IDENTITY_OAUTH_PROVIDERS:
        raise Http404("Unknown sign-in provider")

    callback = reverse("accounts:oauth_callback") + "?" + urlencode({"next": _safe_next(request)})
    try:
        url = identity.get_identity_backend().oauth_authorize_url(
            provider,
            request.build_absolute_uri(callback),
            SessionStorage(request.session),
            cancel_token=identity.new_cancel_token(),
        )
    except IdentityError as e:
        logger.error(f"Could not start {provider} signin: {e.message}")
        return _render_signin(request, error=GENERIC_ERROR_MESSAGE, state=SigninState.ERROR)

    return redirect(url)


def oauth_callback(request):
    """Exchange the provider's authorization code for a session."""
    code = request.GET.get("code")
    if request.GET.get("error") or not code:
        logger.warning(
            f"OAuth callback without code: {request.GET.get('error_description') or request.GET.get('error')}"
        )
        return _render_signin(request, error=GENERIC_ERROR_MESSAGE, state=SigninState.ERROR)

    try:
        auth_session = identity.get_identity_backend().exchange_code(
            code,
            SessionStorage(request.session),
            cancel_token=identity.new_cancel_token(),
        )
    except IdentityError as e:
        logger.error(f"OAuth code exchange failed: {e.message}")
        return _render_signin(request, error=GENERIC_ERROR_MESSAGE, state=SigninState.ERROR)

    logger.info(f"User {auth_session.user_id} ({auth_session.email}) signed in via OAuth.")
    store_session(request, auth_session)
    return redirect(_safe_next(request))


# -------------------------------------------------------------------
# Signout view
# -------------------------------------------------------------------
@require_POST
def signout_view(request):
    """Revoke the session at the backend (best effort) and clear it locally."""
    target = _safe_next(request, default="/")
    stored = load_session(request)
    if stored is None:
        return redirect(target)

    try:
        identity.get_identity_backend().sign_out(stored.access_token, cancel_token=identity.new_cancel_token())
    except IdentityError as e:
        logger.warning(f"Backend sign-out failed for user {stored.user_id}: {e.message}")

    clear_session(request)
    logger.info(f"User {stored.user_id} signed out.")
    return redirect(target)
