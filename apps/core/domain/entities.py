# apps/core/domain/entities.py
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Tożsamość wywołującego (to, co niesie podpisany token)."""
    id: int
    name: str
    email: str
    country: str

    def to_payload(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'country': self.country,
        }
