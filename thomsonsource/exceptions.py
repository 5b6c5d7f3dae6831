"""Исключения пакета thomsonsource"""


class ThomsonSourceError(Exception):
    """Базовое исключение пакета"""


class CalculationInterrupted(ThomsonSourceError):
    """Расчет остановлен по запросу пользователя (аналог InterruptedException)"""


class TooManyEvaluationsError(ThomsonSourceError):
    """Интегратор исчерпал бюджет вычислений подынтегральной функции"""

    def __init__(self, max_evaluations: int) -> None:
        super().__init__(f"Maximal number of evaluations exceeded: {max_evaluations}")
        self.max_evaluations = max_evaluations


class InvalidConfigurationError(ThomsonSourceError, ValueError):
    """Параметры, с которыми расчет невозможен в принципе"""
