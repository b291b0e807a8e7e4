"""
Ядро: checked-арифметика, доменные модели, контракты и ошибки.

Модули не зависят от внешних систем (транспорт оракула, хранилище, matching).
"""
