"""
JSON Schema Contract Validators

Валидация снимков, которые вызывающая сторона передаёт в ядро, против
формальных JSON Schema контрактов (draft 2020-12). Схемы поставляются
вместе с пакетом в spot_margin/core/contracts/schema/.

Схемы:
- market_snapshot.json
- oracle_price_data.json
- oracle_guard_rails.json

load_* функции сначала проверяют контракт, затем строят Pydantic модель.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

from spot_margin.core.domain.guard_rails import OracleGuardRails
from spot_margin.core.domain.market import Market
from spot_margin.core.domain.oracle import OraclePriceData


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    По умолчанию читает схемы из каталога schema/ рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'market_snapshot')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            json.JSONDecodeError: Если файл не является валидным JSON
            ValueError: Если схема не проходит meta-validation
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str, loader: SchemaLoader | None = None):
        """
        Args:
            schema_name: Имя схемы для валидации
            loader: Загрузчик схем (по умолчанию — общий для пакета)
        """
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)


class MarketSnapshotValidator(ContractValidator):
    """Валидатор снимка рынка."""

    def __init__(self):
        super().__init__("market_snapshot")


class OraclePriceDataValidator(ContractValidator):
    """Валидатор показания оракула."""

    def __init__(self):
        super().__init__("oracle_price_data")


class OracleGuardRailsValidator(ContractValidator):
    """Валидатор guard rails оракула."""

    def __init__(self):
        super().__init__("oracle_guard_rails")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_market_snapshot(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    MarketSnapshotValidator().validate(data)


def validate_oracle_price_data(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    OraclePriceDataValidator().validate(data)


def validate_oracle_guard_rails(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    OracleGuardRailsValidator().validate(data)


def load_market(data: Dict[str, Any]) -> Market:
    """
    Контракт + модель: dict → Market.

    Raises:
        ValidationError: Нарушен JSON контракт
        pydantic.ValidationError: Нарушены инварианты модели
    """
    validate_market_snapshot(data)
    return Market.model_validate(data)


def load_oracle_price_data(data: Dict[str, Any]) -> OraclePriceData:
    """Контракт + модель: dict → OraclePriceData."""
    validate_oracle_price_data(data)
    return OraclePriceData.model_validate(data)


def load_guard_rails(data: Dict[str, Any]) -> OracleGuardRails:
    """Контракт + модель: dict → OracleGuardRails (пропущенные поля — протокольные defaults)."""
    validate_oracle_guard_rails(data)
    return OracleGuardRails.model_validate(data)
