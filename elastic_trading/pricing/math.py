"""
Integer tick and liquidity math for Elastic pools.

Elastic uses the same TickMath / SqrtPriceMath as Uniswap V3, so every
function here works on raw integers and reproduces the on-chain rounding.
"""

from decimal import Decimal, localcontext
from math import isqrt

Q96 = 2 ** 96
Q192 = 2 ** 192
MAX_UINT256 = 2 ** 256 - 1

MIN_TICK = -887272
MAX_TICK = -MIN_TICK
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

BPS = 10000


def mul_div_rounding_up(a, b, denominator):
    product = a * b
    result = product // denominator
    if product % denominator:
        result += 1
    return result


def div_rounding_up(a, b):
    return -(-a // b)


def get_sqrt_ratio_at_tick(tick):
    """
    sqrt(1.0001^tick) * 2^96, rounded up like TickMath.getSqrtRatioAtTick.

    Raises:
        ValueError: If tick is outside [MIN_TICK, MAX_TICK]
    """
    if not MIN_TICK <= tick <= MAX_TICK:
        raise ValueError(f"Tick out of range: {tick}")

    abs_tick = abs(tick)
    ratio = 0xfffcb933bd6fad37aa2d162d1a594001 if abs_tick & 0x1 else 0x100000000000000000000000000000000
    if abs_tick & 0x2:
        ratio = (ratio * 0xfff97272373d413259a46990580e213a) >> 128
    if abs_tick & 0x4:
        ratio = (ratio * 0xfff2e50f5f656932ef12357cf3c7fdcc) >> 128
    if abs_tick & 0x8:
        ratio = (ratio * 0xffe5caca7e10e4e61c3624eaa0941cd0) >> 128
    if abs_tick & 0x10:
        ratio = (ratio * 0xffcb9843d60f6159c9db58835c926644) >> 128
    if abs_tick & 0x20:
        ratio = (ratio * 0xff973b41fa98c081472e6896dfb254c0) >> 128
    if abs_tick & 0x40:
        ratio = (ratio * 0xff2ea16466c96a3843ec78b326b52861) >> 128
    if abs_tick & 0x80:
        ratio = (ratio * 0xfe5dee046a99a2a811c461f1969c3053) >> 128
    if abs_tick & 0x100:
        ratio = (ratio * 0xfcbe86c7900a88aedcffc83b479aa3a4) >> 128
    if abs_tick & 0x200:
        ratio = (ratio * 0xf987a7253ac413176f2b074cf7815e54) >> 128
    if abs_tick & 0x400:
        ratio = (ratio * 0xf3392b0822b70005940c7a398e4b70f3) >> 128
    if abs_tick & 0x800:
        ratio = (ratio * 0xe7159475a2c29b7443b29c7fa6e889d9) >> 128
    if abs_tick & 0x1000:
        ratio = (ratio * 0xd097f3bdfd2022b8845ad8f792aa5825) >> 128
    if abs_tick & 0x2000:
        ratio = (ratio * 0xa9f746462d870fdf8a65dc1f90e061e5) >> 128
    if abs_tick & 0x4000:
        ratio = (ratio * 0x70d869a156d2a1b890bb3df62baf32f7) >> 128
    if abs_tick & 0x8000:
        ratio = (ratio * 0x31be135f97d08fd981231505542fcfa6) >> 128
    if abs_tick & 0x10000:
        ratio = (ratio * 0x9aa508b5b7a84e1c677de54f3e99bc9) >> 128
    if abs_tick & 0x20000:
        ratio = (ratio * 0x5d6af8dedb81196699c329225ee604) >> 128
    if abs_tick & 0x40000:
        ratio = (ratio * 0x2216e584f5fa1ea926041bedfe98) >> 128
    if abs_tick & 0x80000:
        ratio = (ratio * 0x48a170391f7dc42444e8fa2) >> 128

    if tick > 0:
        ratio = MAX_UINT256 // ratio

    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (1 if ratio % (1 << 32) else 0)


def get_tick_at_sqrt_ratio(sqrt_ratio_x96):
    """
    Greatest tick whose sqrt ratio is <= sqrt_ratio_x96.

    Binary search over get_sqrt_ratio_at_tick, which is strictly increasing.
    """
    if not MIN_SQRT_RATIO <= sqrt_ratio_x96 < MAX_SQRT_RATIO:
        raise ValueError(f"Sqrt ratio out of range: {sqrt_ratio_x96}")

    low, high = MIN_TICK, MAX_TICK
    while low < high:
        mid = (low + high + 1) // 2
        if get_sqrt_ratio_at_tick(mid) <= sqrt_ratio_x96:
            low = mid
        else:
            high = mid - 1
    return low


def encode_sqrt_ratio_x96(amount1, amount0):
    """sqrt(amount1 / amount0) as a Q64.96 integer"""
    return isqrt((amount1 << 192) // amount0)


def nearest_usable_tick(tick, tick_spacing):
    """
    Round tick to the nearest multiple of tick_spacing (halves round up),
    staying inside [MIN_TICK, MAX_TICK].
    """
    if tick_spacing <= 0:
        raise ValueError(f"Tick spacing must be positive: {tick_spacing}")
    if not MIN_TICK <= tick <= MAX_TICK:
        raise ValueError(f"Tick out of range: {tick}")

    quotient, remainder = divmod(tick, tick_spacing)
    rounded = quotient * tick_spacing
    if 2 * remainder >= tick_spacing:
        rounded += tick_spacing

    if rounded < MIN_TICK:
        return rounded + tick_spacing
    if rounded > MAX_TICK:
        return rounded - tick_spacing
    return rounded


def tick_range_around(tick, tick_spacing, band_spacings=3):
    """
    Symmetric range of `band_spacings` tick spacings on each side of the
    nearest usable tick.

    Returns:
        (tick_lower, tick_upper)
    """
    if band_spacings <= 0:
        raise ValueError(f"band_spacings must be positive: {band_spacings}")
    center = nearest_usable_tick(tick, tick_spacing)
    width = band_spacings * tick_spacing
    return center - width, center + width


def get_amount0_delta(sqrt_ratio_a, sqrt_ratio_b, liquidity, round_up):
    if sqrt_ratio_a > sqrt_ratio_b:
        sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b - sqrt_ratio_a

    if round_up:
        return div_rounding_up(mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b), sqrt_ratio_a)
    return numerator1 * numerator2 // sqrt_ratio_b // sqrt_ratio_a


def get_amount1_delta(sqrt_ratio_a, sqrt_ratio_b, liquidity, round_up):
    if sqrt_ratio_a > sqrt_ratio_b:
        sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b - sqrt_ratio_a, Q96)
    return liquidity * (sqrt_ratio_b - sqrt_ratio_a) // Q96


def max_liquidity_for_amount0(sqrt_ratio_a, sqrt_ratio_b, amount0, use_full_precision=True):
    if sqrt_ratio_a > sqrt_ratio_b:
        sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

    if use_full_precision:
        numerator = amount0 * sqrt_ratio_a * sqrt_ratio_b
        denominator = Q96 * (sqrt_ratio_b - sqrt_ratio_a)
        return numerator // denominator

    intermediate = sqrt_ratio_a * sqrt_ratio_b // Q96
    return amount0 * intermediate // (sqrt_ratio_b - sqrt_ratio_a)


def max_liquidity_for_amount1(sqrt_ratio_a, sqrt_ratio_b, amount1):
    if sqrt_ratio_a > sqrt_ratio_b:
        sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a
    return amount1 * Q96 // (sqrt_ratio_b - sqrt_ratio_a)


def max_liquidity_for_amounts(sqrt_ratio_current, sqrt_ratio_a, sqrt_ratio_b, amount0, amount1,
                              use_full_precision=True):
    """
    Largest liquidity that can be minted with at most amount0 / amount1
    over [sqrt_ratio_a, sqrt_ratio_b] at the current price.
    """
    if sqrt_ratio_a > sqrt_ratio_b:
        sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

    if sqrt_ratio_current <= sqrt_ratio_a:
        return max_liquidity_for_amount0(sqrt_ratio_a, sqrt_ratio_b, amount0, use_full_precision)
    if sqrt_ratio_current < sqrt_ratio_b:
        liquidity0 = max_liquidity_for_amount0(sqrt_ratio_current, sqrt_ratio_b, amount0, use_full_precision)
        liquidity1 = max_liquidity_for_amount1(sqrt_ratio_a, sqrt_ratio_current, amount1)
        return min(liquidity0, liquidity1)
    return max_liquidity_for_amount1(sqrt_ratio_a, sqrt_ratio_b, amount1)


def format_units(raw_amount, decimals):
    """Exact decimal value of a raw token amount"""
    return Decimal(raw_amount).scaleb(-decimals)


def sqrt_price_x96_to_price(sqrt_price_x96, decimals0, decimals1, precision=40):
    """
    Human-readable price of token0 in token1 from a Q64.96 sqrt price.

    Computed in Decimal from the raw integers; no float conversion.
    """
    with localcontext() as ctx:
        ctx.prec = precision
        raw = Decimal(sqrt_price_x96 * sqrt_price_x96) / Decimal(Q192)
        return raw.scaleb(decimals0 - decimals1)
