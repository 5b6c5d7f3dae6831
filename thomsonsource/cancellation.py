"""Кооперативная остановка длительных расчетов"""
import threading
from typing import Optional

from .exceptions import CalculationInterrupted


class CancellationToken:
    """
    Флаг остановки, который передается в длительные циклы и проверяется
    на каждой итерации (замена Thread.isInterrupted() из Java).
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Запросить остановку"""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, where: str = "") -> None:
        """
        :raises CalculationInterrupted: если остановка уже запрошена
        """
        if self._event.is_set():
            raise CalculationInterrupted(f"Interrupted in {where}!" if where else "Interrupted!")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


# Токен, который никогда не срабатывает
NEVER_CANCELLED = CancellationToken()


def ensure_token(token: Optional[CancellationToken]) -> CancellationToken:
    return NEVER_CANCELLED if token is None else token
