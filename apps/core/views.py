# apps/core/views.py
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.forms import ChangePasswordForm, LoginForm, ProfileForm, RegisterForm
from apps.core.http import api_view, form_errors_response, get_identity_provider, json_body, token_required


@csrf_exempt
@require_http_methods(["POST"])
@api_view
async def register_view(request):
    form = RegisterForm(json_body(request))
    if not form.is_valid():
        return form_errors_response(form)

    data = form.cleaned_data
    await get_identity_provider().register(data['name'], data['email'], data['password'], data['country'])
    return JsonResponse({'message': "User registered successfully"}, status=201)


@csrf_exempt
@require_http_methods(["POST"])
@api_view
async def login_view(request):
    form = LoginForm(json_body(request))
    if not form.is_valid():
        return form_errors_response(form)

    token = await get_identity_provider().authenticate(form.cleaned_data['email'], form.cleaned_data['password'])
    return JsonResponse({'token': token})


@require_http_methods(["GET"])
@api_view
@token_required
async def me_view(request):
    identity = await get_identity_provider().get_profile(request.identity.id)
    return JsonResponse(identity.to_payload())


@csrf_exempt
@require_http_methods(["PUT"])
@api_view
@token_required
async def profile_view(request):
    form = ProfileForm(json_body(request))
    if not form.is_valid():
        return form_errors_response(form)

    data = form.cleaned_data
    identity = await get_identity_provider().update_profile(
        request.identity.id, data['name'], data['email'], data['country']
    )
    return JsonResponse(identity.to_payload())


@csrf_exempt
@require_http_methods(["PUT"])
@api_view
@token_required
async def change_password_view(request):
    form = ChangePasswordForm(json_body(request))
    if not form.is_valid():
        return form_errors_response(form)

    await get_identity_provider().change_password(
        request.identity.id, form.cleaned_data['currentPassword'], form.cleaned_data['newPassword']
    )
    return JsonResponse({'message': "Password updated successfully"})
