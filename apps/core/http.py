# apps/core/http.py
import functools
import json
import logging

from django.http import JsonResponse

from apps.core.adapters.django_identity import DjangoIdentityProvider
from apps.core.domain.errors import CredentialError, DomainError, ErrorKind, InvalidInputError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.QUOTA_EXCEEDED: 400,
    ErrorKind.CREDENTIAL_ERROR: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL_FAULT: 500,
}


def get_identity_provider():
    return DjangoIdentityProvider()


def error_response(exc: DomainError) -> JsonResponse:
    return JsonResponse(
        {'message': exc.message, 'kind': exc.kind.value},
        status=STATUS_BY_KIND.get(exc.kind, 500),
    )


def form_errors_response(form) -> JsonResponse:
    """Błędy walidacji pól w formacie zbliżonym do express-validator."""
    errors = [
        {'param': field, 'msg': message}
        for field, messages in form.errors.items()
        for message in messages
    ]
    return JsonResponse({'errors': errors, 'kind': ErrorKind.VALIDATION_ERROR.value}, status=400)


def json_body(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise InvalidInputError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data


def extract_token(request):
    token = request.headers.get('x-auth-token')
    if token:
        return token.strip()
    auth = request.headers.get('Authorization', '')
    if auth.lower().startswith('bearer '):
        return auth[7:].strip()
    return None


def api_view(view):
    """
    Mapuje błędy domenowe na odpowiedzi JSON; każdy inny wyjątek to 500.
    """

    @functools.wraps(view)
    async def wrapper(request, *args, **kwargs):
        try:
            return await view(request, *args, **kwargs)
        except DomainError as exc:
            if exc.kind is ErrorKind.INTERNAL_FAULT:
                logger.error("%s %s failed: %s", request.method, request.path, exc)
            return error_response(exc)
        except Exception:
            logger.exception("%s %s crashed", request.method, request.path)
            return JsonResponse({'message': "Server error", 'kind': ErrorKind.INTERNAL_FAULT.value}, status=500)

    return wrapper


def token_required(view):
    """Odpowiednik login_required dla API: ustawia request.identity."""

    @functools.wraps(view)
    async def wrapper(request, *args, **kwargs):
        token = extract_token(request)
        if not token:
            return JsonResponse(
                {'message': "No token, authorization denied", 'kind': ErrorKind.UNAUTHORIZED.value},
                status=401,
            )
        try:
            request.identity = await get_identity_provider().verify(token)
        except CredentialError:
            return JsonResponse(
                {'message': "Token is not valid", 'kind': ErrorKind.UNAUTHORIZED.value},
                status=401,
            )
        return await view(request, *args, **kwargs)

    return wrapper
