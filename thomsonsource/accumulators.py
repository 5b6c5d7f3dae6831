"""Потокобезопасные счетчики и сумматоры (аналоги AtomicInteger и DoubleAdder)"""
import logging
import threading
from typing import Dict

logger = logging.getLogger(__name__)


class AtomicCounter:
    """Целочисленный счетчик с атомарным инкрементом"""

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._lock = threading.Lock()

    def increment(self, delta: int = 1) -> int:
        with self._lock:
            self._value += delta
            return self._value

    def get(self) -> int:
        with self._lock:
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


class DoubleAdder:
    """Сумматор вещественных чисел, общий для нескольких потоков"""

    def __init__(self) -> None:
        self._sum = 0.0
        self._lock = threading.Lock()

    def add(self, value: float) -> None:
        with self._lock:
            self._sum += value

    def sum(self) -> float:
        with self._lock:
            return self._sum

    def reset(self) -> None:
        with self._lock:
            self._sum = 0.0


class FallbackStatistics:
    """
    Статистика замен численных результатов нулем.

    Расходящиеся интегралы и NaN заменяются нулем, чтобы не испортить
    последующие вычисления; счетчики позволяют увидеть, как часто это происходит.
    """

    QUADRATURE_BUDGET_EXCEEDED = "quadrature_budget_exceeded"
    NAN_SUBSTITUTED = "nan_substituted"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Dict[str, int] = {}
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._counts = {
                self.QUADRATURE_BUDGET_EXCEEDED: 0,
                self.NAN_SUBSTITUTED: 0,
            }

    def record(self, kind: str, where: str = "") -> None:
        with self._lock:
            self._counts[kind] = self._counts.get(kind, 0) + 1
        logger.debug("Fallback to zero (%s) in %s", kind, where or "unknown")

    def count(self, kind: str) -> int:
        with self._lock:
            return self._counts.get(kind, 0)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def __repr__(self) -> str:
        return f"FallbackStatistics({self.snapshot()})"
