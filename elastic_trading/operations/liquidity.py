"""Liquidity position lifecycle for Elastic pools"""

import time
import logging

from web3 import Web3

from ..contracts.erc20 import ERC20
from ..contracts.position_manager import PositionManager
from ..contracts.ticks_fees_reader import TicksFeesReader
from ..core.connection import Web3Manager
from ..core.exceptions import ElasticError, PositionError
from ..core.result import OperationResult
from ..pricing.encoding import (
    CollectOptions,
    IncreaseOptions,
    MintOptions,
    RemoveOptions,
    add_call_parameters,
    remove_call_parameters,
)
from ..pricing.math import Q192, format_units, tick_range_around
from ..pricing.position import Position
from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder
from .pools import PoolStateReader
from .positions import PositionIndex

logger = logging.getLogger(__name__)


def target_amount0(pool, base_token, units=1):
    """
    Raw amount of the pool's token0 worth `units` whole `base_token`.

    If base_token is the pool's token0 this is just units * 10**decimals.
    Otherwise the value of `units` whole token1 is converted at the spot
    price with integer math only.
    """
    if base_token == pool.token0:
        return units * 10 ** pool.token0.decimals
    if base_token != pool.token1:
        raise ValueError(f"{base_token} is not in pool {pool.address}")
    return units * 10 ** pool.token1.decimals * Q192 // (pool.sqrt_price_x96 ** 2)


def _token_amount(token, raw):
    return {
        "symbol": token.symbol,
        "address": token.address,
        "amount": format_units(raw, token.decimals),
        "amount_raw": str(raw),
    }


class LiquidityManager:
    """Create, increase and partially remove Elastic liquidity positions"""

    def __init__(self, manager=None, config=None, position_index=None, dry_run=False):
        """
        Args:
            manager: Web3Manager instance (created with signer if None)
            config: Config instance (manager.config if None)
            position_index: PositionIndex for open position lookup (subgraph client if None)
            dry_run: If True, build calldata and report without sending anything
        """
        self.manager = manager or Web3Manager(config, require_signer=True)
        self.config = config or self.manager.config
        self.dry_run = dry_run

        self.pools = PoolStateReader(self.manager, self.config)
        self.position_index = position_index or PositionIndex(self.config)
        self.tx_builder = TransactionBuilder(self.manager, GasManager(self.manager, self.config))
        self.position_manager = PositionManager(
            self.manager, self.config.contracts.position_manager, self.tx_builder
        )
        self.ticks_reader = TicksFeesReader(self.manager, self.config.contracts.ticks_fees_reader)

    def _deadline(self):
        return int(time.time()) + self.config.deadline_seconds

    def _ensure_allowances(self, pool, amounts):
        """Approve the position manager for each token amount it will pull"""
        approvals = []
        for token, amount in ((pool.token0, amounts.amount0), (pool.token1, amounts.amount1)):
            erc20 = ERC20(self.manager, token.address, self.tx_builder)
            if self.dry_run:
                allowance = erc20.allowance(self.position_manager.address)
                approvals.append({
                    "token": token.symbol,
                    "allowance": str(allowance),
                    "required": str(amount),
                    "needs_approval": allowance < amount,
                })
                continue
            receipt = erc20.approve(self.position_manager.address, amount)
            if receipt is not None:
                approvals.append({"token": token.symbol, "tx_hash": Web3.to_hex(receipt["transactionHash"])})
        return approvals

    def _budget_position(self, pool, tick_lower, tick_upper):
        amount0 = target_amount0(pool, self.config.token0, self.config.budget_units)
        position = Position.from_amount0(pool, tick_lower, tick_upper, amount0, use_full_precision=True)
        if position.liquidity <= 0:
            raise PositionError(
                f"Budget of {self.config.budget_units} {self.config.token0.symbol} yields no liquidity"
            )
        return position

    def _mint_report(self, pool_address, pool, position):
        desired = position.mint_amounts
        minimums = position.mint_amounts_with_slippage(self.config.slippage_bps)
        return {
            "pool": pool_address,
            "current_tick": pool.tick,
            "tick_lower": position.tick_lower,
            "tick_upper": position.tick_upper,
            "liquidity": str(position.liquidity),
            "token0": _token_amount(pool.token0, desired.amount0),
            "token1": _token_amount(pool.token1, desired.amount1),
            "amount0_min": str(minimums.amount0),
            "amount1_min": str(minimums.amount1),
            "slippage_bps": self.config.slippage_bps,
        }

    def _submit(self, operation, params, operation_type, report):
        if self.dry_run:
            report["calldata"] = params.calldata_hex
            report["dry_run"] = True
            return OperationResult.success(operation, **report), None

        receipt = self.position_manager.submit(params, operation_type)
        report["block"] = receipt.get("blockNumber")
        report["gas_used"] = receipt.get("gasUsed")
        return OperationResult.success(operation, tx_hash=Web3.to_hex(receipt["transactionHash"]), **report), receipt

    def _run(self, operation, func):
        try:
            return func()
        except ElasticError as e:
            logger.error("%s failed: %s", operation, e)
            return OperationResult.failure(operation, e)

    def create_position(self):
        """
        Mint a new position centred on the current tick.

        The range spans `band_spacings` tick spacings either side of the
        nearest usable tick; the budget is `budget_units` of the configured
        base token.

        Returns:
            OperationResult with the tick range, amounts and (if mined) position id
        """
        return self._run("create", self._create_position)

    def _create_position(self):
        pool_address, pool = self.pools.get_pool()
        tick_lower, tick_upper = tick_range_around(pool.tick, pool.tick_spacing, self.config.band_spacings)
        logger.info("Creating position in [%d, %d] around tick %d", tick_lower, tick_upper, pool.tick)

        position = self._budget_position(pool, tick_lower, tick_upper)
        report = self._mint_report(pool_address, pool, position)
        report["approvals"] = self._ensure_allowances(pool, position.mint_amounts)

        ticks_previous = self.ticks_reader.ticks_previous(pool_address, tick_lower, tick_upper)
        params = add_call_parameters(
            position,
            ticks_previous,
            MintOptions(recipient=self.manager.address, slippage_bps=self.config.slippage_bps,
                        deadline=self._deadline()),
        )

        result, receipt = self._submit("create", params, "mint", report)
        if receipt is not None:
            result.details["position_id"] = self.position_manager.minted_token_id(receipt)
            logger.info("Position created: %s (tx %s)", result.details["position_id"], result.tx_hash)
        return result

    def increase_liquidity(self):
        """
        Add the configured budget to the caller's open position in the pool.

        Returns:
            OperationResult with the position id and added amounts
        """
        return self._run("increase", self._increase_liquidity)

    def _increase_liquidity(self):
        pool_address, pool = self.pools.get_pool()
        record = self.position_index.select_position(self.manager.address, pool_address)

        position = self._budget_position(pool, record.tick_lower, record.tick_upper)
        report = self._mint_report(pool_address, pool, position)
        report["position_id"] = record.position_id
        report["approvals"] = self._ensure_allowances(pool, position.mint_amounts)

        ticks_previous = self.ticks_reader.ticks_previous(pool_address, record.tick_lower, record.tick_upper)
        params = add_call_parameters(
            position,
            ticks_previous,
            IncreaseOptions(token_id=record.position_id, slippage_bps=self.config.slippage_bps,
                            deadline=self._deadline()),
        )

        result, receipt = self._submit("increase", params, "addLiquidity", report)
        if receipt is not None:
            logger.info("Liquidity added to position %d (tx %s)", record.position_id, result.tx_hash)
        return result

    def remove_liquidity(self):
        """
        Remove `removal_fraction_bps` of the caller's open position and
        collect both tokens plus accrued fees.

        Returns:
            OperationResult with removed liquidity, minimum amounts and fees
        """
        return self._run("remove", self._remove_liquidity)

    def _remove_liquidity(self):
        pool_address, pool = self.pools.get_pool()
        record = self.position_index.select_position(self.manager.address, pool_address)

        position = Position(pool, record.tick_lower, record.tick_upper, record.liquidity)
        partial = position.partial(self.config.removal_fraction_bps)
        if partial.liquidity <= 0:
            raise PositionError(f"Position {record.position_id} has too little liquidity to remove")
        minimums = partial.burn_amounts_with_slippage(self.config.slippage_bps)

        fee0, fee1 = self.ticks_reader.get_total_fees_owed_to_position(
            self.position_manager.address, pool_address, record.position_id
        )
        logger.info("Fees owed to position %d: %d / %d", record.position_id, fee0, fee1)

        params = remove_call_parameters(
            position,
            RemoveOptions(
                token_id=record.position_id,
                liquidity_bps=self.config.removal_fraction_bps,
                slippage_bps=self.config.slippage_bps,
                deadline=self._deadline(),
                collect=CollectOptions(
                    expected_owed0=fee0,
                    expected_owed1=fee1,
                    recipient=self.manager.address,
                    having_fee=fee0 > 0 or fee1 > 0,
                ),
            ),
        )

        report = {
            "pool": pool_address,
            "position_id": record.position_id,
            "tick_lower": record.tick_lower,
            "tick_upper": record.tick_upper,
            "liquidity_removed": str(partial.liquidity),
            "liquidity_remaining": str(record.liquidity - partial.liquidity),
            "token0_min": _token_amount(pool.token0, minimums.amount0),
            "token1_min": _token_amount(pool.token1, minimums.amount1),
            "fees": {
                pool.token0.symbol: _token_amount(pool.token0, fee0),
                pool.token1.symbol: _token_amount(pool.token1, fee1),
            },
            "slippage_bps": self.config.slippage_bps,
        }

        result, receipt = self._submit("remove", params, "removeLiquidity", report)
        if receipt is not None:
            logger.info("Removed %d liquidity from position %d (tx %s)", partial.liquidity,
                        record.position_id, result.tx_hash)
        return result
