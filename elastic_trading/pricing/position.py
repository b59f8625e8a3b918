"""Concentrated liquidity position entity"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Tuple

from .math import (
    BPS,
    MAX_SQRT_RATIO,
    MAX_TICK,
    MAX_UINT256,
    MIN_SQRT_RATIO,
    MIN_TICK,
    encode_sqrt_ratio_x96,
    get_amount0_delta,
    get_amount1_delta,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    max_liquidity_for_amounts,
)
from .types import PoolState, TokenAmounts


@dataclass(frozen=True)
class Position:
    """
    A liquidity position over [tick_lower, tick_upper) in a pool.

    Amount getters follow the pool contract: amounts owed to the pool
    (mint) round up, amounts paid out (burn) round down.
    """

    pool: PoolState
    tick_lower: int
    tick_upper: int
    liquidity: int

    def __post_init__(self):
        if self.tick_lower >= self.tick_upper:
            raise ValueError(f"tick_lower must be < tick_upper: {self.tick_lower} >= {self.tick_upper}")
        if self.tick_lower < MIN_TICK or self.tick_upper > MAX_TICK:
            raise ValueError(f"Ticks out of range: [{self.tick_lower}, {self.tick_upper}]")
        spacing = self.pool.tick_spacing
        if self.tick_lower % spacing or self.tick_upper % spacing:
            raise ValueError(
                f"Ticks [{self.tick_lower}, {self.tick_upper}] not aligned to spacing {spacing}"
            )
        if self.liquidity < 0:
            raise ValueError(f"Negative liquidity: {self.liquidity}")

    @property
    def sqrt_ratio_lower(self):
        return get_sqrt_ratio_at_tick(self.tick_lower)

    @property
    def sqrt_ratio_upper(self):
        return get_sqrt_ratio_at_tick(self.tick_upper)

    @classmethod
    def from_amounts(cls, pool, tick_lower, tick_upper, amount0, amount1, use_full_precision=True):
        """Largest position mintable with at most amount0 and amount1"""
        liquidity = max_liquidity_for_amounts(
            pool.sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_lower),
            get_sqrt_ratio_at_tick(tick_upper),
            amount0,
            amount1,
            use_full_precision,
        )
        return cls(pool, tick_lower, tick_upper, liquidity)

    @classmethod
    def from_amount0(cls, pool, tick_lower, tick_upper, amount0, use_full_precision=True):
        """Position whose liquidity is bounded by amount0 only"""
        return cls.from_amounts(pool, tick_lower, tick_upper, amount0, MAX_UINT256, use_full_precision)

    def _amounts(self, pool, round_up) -> TokenAmounts:
        sqrt_lower = self.sqrt_ratio_lower
        sqrt_upper = self.sqrt_ratio_upper

        if pool.tick < self.tick_lower:
            return TokenAmounts(
                get_amount0_delta(sqrt_lower, sqrt_upper, self.liquidity, round_up),
                0,
            )
        if pool.tick < self.tick_upper:
            return TokenAmounts(
                get_amount0_delta(pool.sqrt_price_x96, sqrt_upper, self.liquidity, round_up),
                get_amount1_delta(sqrt_lower, pool.sqrt_price_x96, self.liquidity, round_up),
            )
        return TokenAmounts(
            0,
            get_amount1_delta(sqrt_lower, sqrt_upper, self.liquidity, round_up),
        )

    @property
    def amount0(self) -> int:
        """token0 value of the position at the current price, rounded down"""
        return self._amounts(self.pool, round_up=False).amount0

    @property
    def amount1(self) -> int:
        """token1 value of the position at the current price, rounded down"""
        return self._amounts(self.pool, round_up=False).amount1

    @property
    def mint_amounts(self) -> TokenAmounts:
        """Amounts required to mint this liquidity, rounded up"""
        return self._amounts(self.pool, round_up=True)

    def ratios_after_slippage(self, slippage_bps) -> Tuple[int, int]:
        """
        Sqrt prices bounding a price move of `slippage_bps` either way.

        Returns:
            (sqrt_ratio_lower, sqrt_ratio_upper)
        """
        price = self.pool.token0_price
        price_lower = price * Fraction(BPS - slippage_bps, BPS)
        price_upper = price * Fraction(BPS + slippage_bps, BPS)

        sqrt_lower = encode_sqrt_ratio_x96(price_lower.numerator, price_lower.denominator)
        if sqrt_lower <= MIN_SQRT_RATIO:
            sqrt_lower = MIN_SQRT_RATIO + 1

        sqrt_upper = encode_sqrt_ratio_x96(price_upper.numerator, price_upper.denominator)
        if sqrt_upper >= MAX_SQRT_RATIO:
            sqrt_upper = MAX_SQRT_RATIO - 1

        return sqrt_lower, sqrt_upper

    def _slippage_pools(self, slippage_bps) -> Tuple[PoolState, PoolState]:
        sqrt_lower, sqrt_upper = self.ratios_after_slippage(slippage_bps)
        pool_lower = self.pool.with_price(sqrt_lower, get_tick_at_sqrt_ratio(sqrt_lower))
        pool_upper = self.pool.with_price(sqrt_upper, get_tick_at_sqrt_ratio(sqrt_upper))
        return pool_lower, pool_upper

    def mint_amounts_with_slippage(self, slippage_bps) -> TokenAmounts:
        """
        Minimum amounts the pool must accept for the mint to succeed if the
        price moves by up to `slippage_bps`.
        """
        pool_lower, pool_upper = self._slippage_pools(slippage_bps)

        desired = self.mint_amounts
        to_create = Position.from_amounts(
            self.pool,
            self.tick_lower,
            self.tick_upper,
            desired.amount0,
            desired.amount1,
            use_full_precision=False,
        )

        amount0 = Position(pool_upper, self.tick_lower, self.tick_upper, to_create.liquidity).mint_amounts.amount0
        amount1 = Position(pool_lower, self.tick_lower, self.tick_upper, to_create.liquidity).mint_amounts.amount1
        return TokenAmounts(amount0, amount1)

    def burn_amounts_with_slippage(self, slippage_bps) -> TokenAmounts:
        """Minimum amounts received when burning this liquidity under slippage"""
        pool_lower, pool_upper = self._slippage_pools(slippage_bps)

        amount0 = Position(pool_upper, self.tick_lower, self.tick_upper, self.liquidity).amount0
        amount1 = Position(pool_lower, self.tick_lower, self.tick_upper, self.liquidity).amount1
        return TokenAmounts(amount0, amount1)

    def partial(self, fraction_bps) -> "Position":
        """Same range holding `fraction_bps` of this position's liquidity"""
        if not 0 < fraction_bps <= BPS:
            raise ValueError(f"fraction_bps must be in (0, {BPS}]: {fraction_bps}")
        return Position(self.pool, self.tick_lower, self.tick_upper, self.liquidity * fraction_bps // BPS)
