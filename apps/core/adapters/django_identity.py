# apps/core/adapters/django_identity.py
import logging
from datetime import timedelta

from asgiref.sync import sync_to_async
from django.conf import settings
from django.contrib.auth.models import User
from django.core import signing
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from apps.core.domain.entities import Identity
from apps.core.domain.errors import CredentialError, InvalidInputError
from apps.core.forms import PASSWORD_MIN_LENGTH
from apps.core.models import UserProfile
from apps.core.ports.identity_provider import IIdentityProvider

logger = logging.getLogger(__name__)

TOKEN_SALT = 'taskboard.identity'
TOKEN_MAX_AGE = timedelta(days=7)


class DjangoIdentityProvider(IIdentityProvider):
    """
    Konta w django.contrib.auth (username = e-mail, first_name = nazwa),
    kraj w UserProfile, tokeny podpisane przez django.core.signing.
    """

    def __init__(self, secret: str = None, max_age: timedelta = TOKEN_MAX_AGE):
        self.secret = secret or getattr(settings, 'TASKBOARD_TOKEN_SECRET', None) or settings.SECRET_KEY
        self.max_age = max_age

    def to_identity(self, user: User) -> Identity:
        profile = UserProfile.objects.filter(user=user).first()
        return Identity(
            id=user.id,
            name=user.first_name,
            email=user.email,
            country=profile.country if profile else "",
        )

    # --- rejestracja / logowanie ---

    async def register(self, name, email, password, country) -> Identity:
        return await sync_to_async(self._register)(name, email, password, country)

    def _register(self, name, email, password, country) -> Identity:
        email = self._clean_email(email)
        if not name or not name.strip():
            raise InvalidInputError("Name is required")
        if not country or not country.strip():
            raise InvalidInputError("Country is required")
        self._check_password_length(password, "Password must be at least 6 characters")

        if User.objects.filter(username=email).exists():
            raise CredentialError("User already exists")

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=email, email=email, password=password, first_name=name.strip()
                )
                UserProfile.objects.update_or_create(user=user, defaults={'country': country.strip()})
        except IntegrityError:
            # Równoległa rejestracja na ten sam adres
            raise CredentialError("User already exists")

        logger.info("Registered user %s", user.id)
        return self.to_identity(user)

    async def authenticate(self, email, password) -> str:
        identity = await sync_to_async(self._check_credentials)(email, password)
        return self.issue_token(identity)

    def _check_credentials(self, email, password) -> Identity:
        user = User.objects.filter(username=(email or "").strip().lower()).first()
        if user is None or not user.check_password(password or ""):
            raise CredentialError("Invalid credentials")
        return self.to_identity(user)

    # --- tokeny ---

    def issue_token(self, identity: Identity) -> str:
        return signing.dumps(identity.to_payload(), key=self.secret, salt=TOKEN_SALT)

    async def verify(self, token: str) -> Identity:
        try:
            payload = signing.loads(token, key=self.secret, salt=TOKEN_SALT, max_age=self.max_age)
        except signing.SignatureExpired:
            raise CredentialError("Token has expired")
        except signing.BadSignature:
            raise CredentialError("Token is not valid")

        try:
            return Identity(
                id=int(payload['id']),
                name=payload.get('name', ""),
                email=payload.get('email', ""),
                country=payload.get('country', ""),
            )
        except (KeyError, TypeError, ValueError):
            raise CredentialError("Token is not valid")

    # --- profil ---

    async def get_profile(self, user_id) -> Identity:
        return await sync_to_async(self._get_profile)(user_id)

    def _get_profile(self, user_id) -> Identity:
        user = self._get_user(user_id)
        return self.to_identity(user)

    async def update_profile(self, user_id, name, email, country) -> Identity:
        return await sync_to_async(self._update_profile)(user_id, name, email, country)

    def _update_profile(self, user_id, name, email, country) -> Identity:
        email = self._clean_email(email)
        if not name or not name.strip():
            raise InvalidInputError("Name is required")
        if not country or not country.strip():
            raise InvalidInputError("Country is required")

        user = self._get_user(user_id)
        if User.objects.filter(username=email).exclude(id=user.id).exists():
            raise CredentialError("Email is already in use")

        with transaction.atomic():
            user.username = email
            user.email = email
            user.first_name = name.strip()
            user.save(update_fields=['username', 'email', 'first_name'])
            UserProfile.objects.update_or_create(user=user, defaults={'country': country.strip()})

        return self.to_identity(user)

    async def change_password(self, user_id, current_password, new_password) -> None:
        await sync_to_async(self._change_password)(user_id, current_password, new_password)

    def _change_password(self, user_id, current_password, new_password) -> None:
        user = self._get_user(user_id)
        if not user.check_password(current_password or ""):
            raise CredentialError("Current password is incorrect")
        self._check_password_length(new_password, "New password must be at least 6 characters")

        user.set_password(new_password)
        user.save(update_fields=['password'])
        logger.info("Password changed for user %s", user.id)

    # --- pomocnicze ---

    def _get_user(self, user_id) -> User:
        user = User.objects.filter(id=user_id).first()
        if user is None:
            # Token ważny, ale konta już nie ma
            raise CredentialError("User no longer exists")
        return user

    @staticmethod
    def _clean_email(email) -> str:
        email = (email or "").strip().lower()
        try:
            validate_email(email)
        except ValidationError:
            raise InvalidInputError("Please include a valid email")
        return email

    @staticmethod
    def _check_password_length(password, message):
        if not password or len(password) < PASSWORD_MIN_LENGTH:
            raise InvalidInputError(message)
