"""Calldata encoding for the Elastic PositionManager, QuoterV2 and Router"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from eth_abi import decode, encode
from web3 import Web3

from .position import Position
from .trade import QuoteOutput, Trade
from .types import Token

MINT_PARAMS = "(address,address,uint24,int24,int24,int24[2],uint256,uint256,uint256,uint256,address,uint256)"
ADD_LIQUIDITY_PARAMS = "(uint256,int24[2],uint256,uint256,uint256,uint256,uint256)"
REMOVE_LIQUIDITY_PARAMS = "(uint256,uint128,uint256,uint256,uint256)"
BURN_RTOKENS_PARAMS = "(uint256,uint256,uint256,uint256)"
QUOTE_SINGLE_PARAMS = "(address,address,uint256,uint24,uint160)"
QUOTE_SINGLE_OUTPUT = "(uint256,uint256,uint160,uint32,uint256)"
SWAP_SINGLE_PARAMS = "(address,address,uint24,address,uint256,uint256,uint256,uint160)"


@dataclass(frozen=True)
class MethodParameters:
    """Calldata and native value for one contract call"""

    calldata: bytes
    value: int = 0

    @property
    def calldata_hex(self) -> str:
        return Web3.to_hex(self.calldata)


@dataclass(frozen=True)
class MintOptions:
    recipient: str
    slippage_bps: int
    deadline: int


@dataclass(frozen=True)
class IncreaseOptions:
    token_id: int
    slippage_bps: int
    deadline: int


@dataclass(frozen=True)
class CollectOptions:
    """
    Fee collection settings used when removing liquidity.

    expected_owed0/1 are the fees already accrued to the position; having_fee
    adds a burnRTokens call so those fees are realised before transfer.
    """

    expected_owed0: int
    expected_owed1: int
    recipient: str
    having_fee: bool = False


@dataclass(frozen=True)
class RemoveOptions:
    token_id: int
    liquidity_bps: int
    slippage_bps: int
    deadline: int
    collect: CollectOptions


@dataclass(frozen=True)
class SwapOptions:
    recipient: str
    slippage_bps: int
    deadline: int
    limit_sqrt_p: int = 0


def function_selector(signature: str) -> bytes:
    """First 4 bytes of keccak256(signature)"""
    return bytes(Web3.keccak(text=signature)[:4])


def encode_function_call(name: str, arg_types: Sequence[str], args: Sequence) -> bytes:
    signature = f"{name}({','.join(arg_types)})"
    return function_selector(signature) + encode(list(arg_types), list(args))


def encode_multicall(calldatas: List[bytes]) -> bytes:
    """Wrap several calls in multicall(bytes[]); a single call is returned as-is"""
    if not calldatas:
        raise ValueError("No calls to encode")
    if len(calldatas) == 1:
        return calldatas[0]
    return encode_function_call("multicall", ["bytes[]"], [calldatas])


def add_call_parameters(position: Position, ticks_previous: Tuple[int, int], options) -> MethodParameters:
    """
    Calldata minting a new position (MintOptions) or adding liquidity to an
    existing one (IncreaseOptions).

    Args:
        position: Position describing the liquidity to add
        ticks_previous: Initialized tick hints at or below (tick_lower, tick_upper)
        options: MintOptions or IncreaseOptions
    """
    if position.liquidity <= 0:
        raise ValueError("Liquidity must be positive")

    desired = position.mint_amounts
    minimums = position.mint_amounts_with_slippage(options.slippage_bps)
    previous = [int(ticks_previous[0]), int(ticks_previous[1])]

    if isinstance(options, MintOptions):
        params = (
            position.pool.token0.address,
            position.pool.token1.address,
            int(position.pool.fee_units),
            position.tick_lower,
            position.tick_upper,
            previous,
            desired.amount0,
            desired.amount1,
            minimums.amount0,
            minimums.amount1,
            Web3.to_checksum_address(options.recipient),
            options.deadline,
        )
        calldata = encode_function_call("mint", [MINT_PARAMS], [params])
    else:
        params = (
            options.token_id,
            previous,
            desired.amount0,
            desired.amount1,
            minimums.amount0,
            minimums.amount1,
            options.deadline,
        )
        calldata = encode_function_call("addLiquidity", [ADD_LIQUIDITY_PARAMS], [params])

    return MethodParameters(calldata=encode_multicall([calldata]))


def _transfer_all_tokens(token: Token, minimum: int, recipient: str) -> bytes:
    return encode_function_call(
        "transferAllTokens",
        ["address", "uint256", "address"],
        [token.address, minimum, Web3.to_checksum_address(recipient)],
    )


def remove_call_parameters(position: Position, options: RemoveOptions) -> MethodParameters:
    """
    Calldata removing `options.liquidity_bps` of a position and sending
    both tokens (plus accrued fees) to the recipient.

    Sequence: removeLiquidity, burnRTokens (only if fees are owed),
    transferAllTokens(token0), transferAllTokens(token1).
    """
    partial = position.partial(options.liquidity_bps)
    if partial.liquidity <= 0:
        raise ValueError("Cannot remove zero liquidity")

    minimums = partial.burn_amounts_with_slippage(options.slippage_bps)
    calldatas = [
        encode_function_call(
            "removeLiquidity",
            [REMOVE_LIQUIDITY_PARAMS],
            [(options.token_id, partial.liquidity, minimums.amount0, minimums.amount1, options.deadline)],
        )
    ]

    collect = options.collect
    if collect.having_fee:
        calldatas.append(
            encode_function_call(
                "burnRTokens",
                [BURN_RTOKENS_PARAMS],
                [(options.token_id, 0, 0, options.deadline)],
            )
        )

    calldatas.append(
        _transfer_all_tokens(position.pool.token0, collect.expected_owed0 + minimums.amount0, collect.recipient)
    )
    calldatas.append(
        _transfer_all_tokens(position.pool.token1, collect.expected_owed1 + minimums.amount1, collect.recipient)
    )

    return MethodParameters(calldata=encode_multicall(calldatas))


def quote_call_parameters(token_in: Token, token_out: Token, fee_units: int, amount_in: int,
                          limit_sqrt_p: int = 0) -> MethodParameters:
    """Calldata for QuoterV2.quoteExactInputSingle (read via eth_call)"""
    params = (token_in.address, token_out.address, amount_in, int(fee_units), limit_sqrt_p)
    return MethodParameters(
        calldata=encode_function_call("quoteExactInputSingle", [QUOTE_SINGLE_PARAMS], [params])
    )


def decode_quote_output(data: bytes) -> QuoteOutput:
    (used, returned, after_sqrt_p, ticks_crossed, gas_estimate), = decode([QUOTE_SINGLE_OUTPUT], bytes(data))
    return QuoteOutput(used, returned, after_sqrt_p, ticks_crossed, gas_estimate)


def swap_call_parameters(trade: Trade, options: SwapOptions, minimum_amount_out: Optional[int] = None) -> MethodParameters:
    """Calldata for Router.swapExactInputSingle"""
    if minimum_amount_out is None:
        minimum_amount_out = trade.minimum_amount_out(options.slippage_bps)

    params = (
        trade.route.token_in.address,
        trade.route.token_out.address,
        int(trade.route.pool.fee_units),
        Web3.to_checksum_address(options.recipient),
        options.deadline,
        trade.input_amount,
        minimum_amount_out,
        options.limit_sqrt_p,
    )
    return MethodParameters(
        calldata=encode_function_call("swapExactInputSingle", [SWAP_SINGLE_PARAMS], [params])
    )
