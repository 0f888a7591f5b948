# accounts/api_views.py
"""
JSON endpoints under /api/auth/.

signup  - POST {name, email, password} → 201 {"success": true} | 4xx/5xx {"error": ...}
session - GET → {"user": {...}, "expires": ...} | null
signout - POST → {"url": <where to go next>}
"""
import json
import logging
from datetime import datetime, timezone

from django.http import JsonResponse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core import identity
from core.errors import DuplicateEmail, IdentityError, SignupRejected, TransportError, user_message
from core.session import SessionStatus, clear_session, load_session, resolve_session

from . import services
from .forms import SignupForm

logger = logging.getLogger(__name__)

SIGNUP_FIELDS = ("name", "email", "password")


def _error(message, status):
    return JsonResponse({"error": message}, status=status)


@csrf_exempt
@require_POST
def signup_api(request):
    try:
        payload = json.loads(request.body or b"")
    except (ValueError, UnicodeDecodeError):
        return _error("Invalid request body", 400)
    if not isinstance(payload, dict):
        return _error("Invalid request body", 400)

    fields = {key: payload.get(key) for key in SIGNUP_FIELDS}
    # absent fields fall through to the form's "required" messages
    if any(value is not None and not isinstance(value, str) for value in fields.values()):
        return _error("Invalid request body", 400)

    form = SignupForm(data=fields)
    if not form.is_valid():
        return _error(form.first_error(), 400)

    data = form.cleaned_data
    try:
        services.register_user(
            identity.get_identity_backend(),
            data["name"],
            data["email"],
            data["password"],
            cancel_token=identity.new_cancel_token(),
        )
    except DuplicateEmail as e:
        return _error(user_message(e), 409)
    except SignupRejected as e:
        return _error(user_message(e), 400)
    except TransportError as e:
        logger.error(f"Signup for {data['email']} failed: {e.message}")
        return _error(user_message(e), 502)

    return JsonResponse({"success": True}, status=201)


@require_GET
def session_api(request):
    state = resolve_session(request, identity.get_identity_backend(), cancel_token=identity.new_cancel_token())
    if state.status is SessionStatus.LOADING:
        return JsonResponse({"status": "loading"}, status=503)
    if not state.is_authenticated:
        return JsonResponse(None, safe=False)

    auth_session = state.session
    expires = None
    if auth_session.expires_at is not None:
        expires = datetime.fromtimestamp(auth_session.expires_at, tz=timezone.utc).isoformat()
    return JsonResponse({"user": auth_session.public_user(), "expires": expires})


@require_POST
def signout_api(request):
    callback = request.POST.get("callbackUrl") or "/"
    if not url_has_allowed_host_and_scheme(callback, allowed_hosts={request.get_host()}):
        callback = "/"

    stored = load_session(request)
    if stored is not None:
        try:
            identity.get_identity_backend().sign_out(stored.access_token, cancel_token=identity.new_cancel_token())
        except IdentityError as e:
            logger.warning(f"Backend sign-out failed for user {stored.user_id}: {e.message}")
        clear_session(request)
        logger.info(f"User {stored.user_id} signed out.")

    return JsonResponse({"url": callback})
