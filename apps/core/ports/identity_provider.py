# apps/core/ports/identity_provider.py
from abc import ABC, abstractmethod

from apps.core.domain.entities import Identity


class IIdentityProvider(ABC):
    @abstractmethod
    async def register(self, name: str, email: str, password: str, country: str) -> Identity:
        """Zakłada konto. CredentialError, gdy e-mail jest już zajęty."""
        pass

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> str:
        """Zwraca podpisany token (ważny 7 dni) albo rzuca CredentialError."""
        pass

    @abstractmethod
    async def verify(self, token: str) -> Identity:
        pass

    @abstractmethod
    async def get_profile(self, user_id: int) -> Identity:
        pass

    @abstractmethod
    async def update_profile(self, user_id: int, name: str, email: str, country: str) -> Identity:
        pass

    @abstractmethod
    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        pass
