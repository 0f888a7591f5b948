from functools import wraps
from urllib.parse import urlencode

from django.shortcuts import redirect, render
from django.urls import reverse

from core import identity
from core.session import SessionStatus, resolve_session

LOADING_TEMPLATE = "dashboard/loading.html"
LOADING_RETRY_SECONDS = 3


def signin_redirect(request):
    return redirect(f"{reverse('accounts:signin')}?{urlencode({'next': request.get_full_path()})}")


def protected_view(template_name):
    """
    Decorator for views that need a signed-in visitor:
    - Validates the stored session with the identity backend on every request
    - No session → redirect to signin
    - Backend unreachable → waiting page that polls again, nothing else
    - Otherwise calls the view with the AuthSession as second argument
    and renders template_name with the context dict it returns
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            state = resolve_session(
                request,
                identity.get_identity_backend(),
                cancel_token=identity.new_cancel_token(),
            )

            if state.status is SessionStatus.LOADING:
                return render(request, LOADING_TEMPLATE, {"retry_seconds": LOADING_RETRY_SECONDS})

            if state.status is SessionStatus.UNAUTHENTICATED:
                return signin_redirect(request)

            context = view_func(request, state.session, *args, **kwargs)
            context.setdefault("auth_session", state.session)
            return render(request, template_name, context)

        return _wrapped_view
    return decorator
