# apps/core/application/saga.py
import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from apps.core.domain.errors import DomainError, InternalFault

logger = logging.getLogger(__name__)

Compensation = Callable[[Any], Awaitable[Any]]


class Saga:
    """
    Wielokrokowa mutacja bez transakcji w magazynie.

    Każdy krok może zarejestrować akcję kompensującą. Jeśli któryś z
    późniejszych kroków się wywali, wykonane kroki są cofane w odwrotnej
    kolejności. Błędy domenowe wychodzą bez zmian, pozostałe jako InternalFault.

        async with Saga("create task") as saga:
            await saga.step(bump_counter, compensate=lambda _: undo_bump())
            task = await saga.step(insert_task, compensate=lambda t: remove(t))
    """

    def __init__(self, name: str):
        self.name = name
        self._done: List[Tuple[str, Compensation, Any]] = []

    async def step(self, action: Callable[[], Awaitable[Any]],
                   compensate: Optional[Compensation] = None, label: str = "") -> Any:
        result = await action()
        if compensate is not None:
            self._done.append((label or getattr(action, '__name__', 'step'), compensate, result))
        return result

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        # CancelledError i inne BaseException przepuszczamy bez kompensacji
        if exc is None or not isinstance(exc, Exception):
            return False

        await self._compensate()

        if isinstance(exc, DomainError):
            return False
        raise InternalFault(f"{self.name} failed: {exc}") from exc

    async def _compensate(self):
        while self._done:
            label, compensate, result = self._done.pop()
            try:
                await compensate(result)
                logger.info("Saga '%s': compensated step '%s'", self.name, label)
            except Exception:
                # Oryginalny błąd i tak poleci wyżej; tutaj tylko ślad w logach
                logger.exception("Saga '%s': compensation of '%s' failed", self.name, label)
