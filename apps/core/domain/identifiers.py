# apps/core/domain/identifiers.py
from typing import Union

from apps.core.domain.errors import NotFoundError


def parse_id(raw: Union[int, str, None], not_found_message: str) -> int:
    """
    Zamienia identyfikator z żądania na int.
    Niepoprawny identyfikator jest dla klienta nieodróżnialny od brakującego
    zasobu, więc zgłaszamy NotFound zamiast błędu wewnętrznego.
    """
    if isinstance(raw, bool):
        raise NotFoundError(not_found_message)
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except (TypeError, ValueError):
            raise NotFoundError(not_found_message)
    if value <= 0:
        raise NotFoundError(not_found_message)
    return value
