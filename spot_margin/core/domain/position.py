"""
SpotPosition — позиция пользователя на одном spot-рынке.

Immutable Pydantic модель. Баланс хранится как scaled balance; реальное
количество токенов получается через кумулятивный множитель рынка.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from spot_margin.core.domain.market import Market, SpotBalanceType
from spot_margin.core.domain.oracle import OraclePriceData
from spot_margin.core.math.balance import get_amount_of_tokens, get_amount_signed, get_token_value
from spot_margin.core.math.constants import PRICE_PRECISION
from spot_margin.core.math.int_types import I128, I64, U16, U64, U8
from spot_margin.core.math.price import PositionDirection
from spot_margin.core.math.safe_math import safe_add, safe_div, safe_mul


@dataclass(frozen=True)
class WorstCaseTokenAmounts:
    """
    Худший случай исполнения открытых ордеров.

    Attributes:
        token_amount: Знаковое количество токенов после исполнения худшей стороны
        orders_value: Стоимость исполненных ордеров (QUOTE_PRECISION)
    """

    token_amount: int
    orders_value: int


class SpotPosition(BaseModel):
    """
    Позиция пользователя на spot-рынке.
    """

    market_index: int = Field(default=0, ge=0, le=U16.max_value)
    scaled_balance: int = Field(default=0, ge=0, le=U64.max_value)
    balance_type: SpotBalanceType = Field(default=SpotBalanceType.DEPOSITS)

    base_asset_amount: int = Field(default=0, ge=I64.min_value, le=I64.max_value)
    quote_asset_amount: int = Field(default=0, ge=I64.min_value, le=I64.max_value)

    open_bids: int = Field(default=0, ge=I64.min_value, le=I64.max_value)
    open_asks: int = Field(default=0, ge=I64.min_value, le=I64.max_value)
    num_open_orders: int = Field(default=0, ge=0, le=U8.max_value)
    two_way_orders_enabled: bool = Field(default=False)

    model_config = {"frozen": True}

    def is_empty(self) -> bool:
        return self.scaled_balance == 0 and self.num_open_orders == 0

    def has_open_orders(self) -> bool:
        return self.num_open_orders > 0 or self.open_bids > 0 or self.open_asks > 0

    def has_open_position(self) -> bool:
        return self.base_asset_amount != 0

    def has_settled_pnl(self) -> bool:
        """Позиция закрыта, но на ней остался положительный quote (незабранный PnL)."""
        return self.base_asset_amount == 0 and self.quote_asset_amount > 0

    def get_token_amount(self, market: Market) -> int:
        """Количество токенов (депозиты вниз, займы вверх)."""
        return get_amount_of_tokens(self.scaled_balance, market, self.balance_type)

    def get_token_amount_signed(self, market: Market) -> int:
        """Знаковое количество токенов: займы отрицательны."""
        return get_amount_signed(self.get_token_amount(market), self.balance_type)

    def get_worst_case_token_amounts(
        self,
        market: Market,
        oracle_price_data: OraclePriceData,
        twap_5min: Optional[int] = None,
        token_amount: Optional[int] = None,
    ) -> WorstCaseTokenAmounts:
        """
        Худший случай: исполнились все bids или все asks.

        Выбирается сторона, дающая больший по модулю итоговый баланс. Ордера
        оцениваются по max(twap_5min, oracle price), если twap_5min задан.

        Args:
            market: Рынок позиции
            oracle_price_data: Показание оракула
            twap_5min: 5-минутный TWAP оракула
            token_amount: Знаковое количество токенов (по умолчанию из позиции)
        """
        if token_amount is None:
            token_amount = self.get_token_amount_signed(market)

        after_bids = safe_add(token_amount, self.open_bids, I128)
        after_asks = safe_add(token_amount, self.open_asks, I128)

        oracle_price = oracle_price_data.price
        if twap_5min is not None:
            oracle_price = max(twap_5min, oracle_price)

        if abs(after_bids) > abs(after_asks):
            orders_value = get_token_value(-self.open_bids, market.decimals, oracle_price)
            return WorstCaseTokenAmounts(token_amount=after_bids, orders_value=orders_value)

        orders_value = get_token_value(-self.open_asks, market.decimals, oracle_price)
        return WorstCaseTokenAmounts(token_amount=after_asks, orders_value=orders_value)

    def get_position_direction(self) -> PositionDirection:
        """
        Направление позиции по base_asset_amount.

        В two-way режиме нулевая позиция имеет направление TWO_WAY,
        иначе нулевая позиция считается SHORT.
        """
        if self.base_asset_amount > 0:
            return PositionDirection.LONG
        if self.two_way_orders_enabled and self.base_asset_amount == 0:
            return PositionDirection.TWO_WAY
        return PositionDirection.SHORT

    def get_opposite_direction(self) -> PositionDirection:
        """Направление, закрывающее позицию."""
        return self.get_position_direction().opposite()

    def get_position_cost_schedule(self) -> int:
        """
        Средняя цена входа (PRICE_PRECISION): -quote * PRICE_PRECISION / base.

        Для пустой позиции 0.
        """
        if self.base_asset_amount == 0:
            return 0
        return safe_div(
            safe_mul(-self.quote_asset_amount, PRICE_PRECISION, I128),
            self.base_asset_amount,
            I128,
        )
