"""Физические и численные константы источника Томсона"""

# Заряд электрона (Кл)
E: float = 1.602e-19
# Энергия покоя электрона (МэВ)
MC2: float = 0.5109989461
# Произведение постоянной Планка и скорости света (Дж·м)
HC: float = 3.1614e-26
# Скорость света (м/с)
C: float = 299792458.0
# Полное томсоновское сечение (м^2)
SIGMA_T: float = 6.65e-29

# Число колонок в записи луча (формат Shadow)
NUMBER_OF_COLUMNS: int = 18
# Число параметров Стокса
NUMBER_OF_POL_PARAM: int = 4
# Максимальное число вычислений подынтегральной функции
MAXIMAL_NUMBER_OF_EVALUATIONS: int = 1000000
# Бюджет вычислений для линейного интеграла яркости без разброса
BRILLIANCE_NUMBER_OF_EVALUATIONS: int = 30000
# Множитель диапазона интегрирования
INT_RANGE: float = 3.0
# Численный сдвиг для улучшения сходимости интегралов
SHIFT: float = 1.0e10
# Множитель размеров области генерации лучей
RAY_MULT: float = 2.0
# Множитель размеров области Монте-Карло для геометрического фактора
GF_MULT: float = 2.0
