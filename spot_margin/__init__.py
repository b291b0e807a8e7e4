"""
spot_margin — риск/прайсинг ядро spot-рынка с маржинальным кредитованием.

Чистые синхронные вычисления над целыми с фиксированной точностью:
checked-арифметика, модель процентной ставки по утилизации, оценка балансов,
классификация оракула, TWAP и стандартизация цен/размеров.
"""

__version__ = "0.1.0"
