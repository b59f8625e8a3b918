"""Quote and swap operations for Elastic pools"""

import time
import logging

from web3 import Web3

from ..contracts.erc20 import ERC20
from ..contracts.quoter import Quoter
from ..contracts.router import Router
from ..core.connection import Web3Manager
from ..core.exceptions import ElasticError, QuoteError
from ..core.result import OperationResult
from ..pricing.encoding import SwapOptions, swap_call_parameters
from ..pricing.math import format_units, sqrt_price_x96_to_price
from ..pricing.trade import Quote, Route, Trade
from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder
from .pools import PoolStateReader

logger = logging.getLogger(__name__)


class SwapManager:
    """Quote and execute exact-input swaps of token0 into token1"""

    def __init__(self, manager=None, config=None, require_signer=True, dry_run=False):
        """
        Args:
            manager: Web3Manager instance (created if None)
            config: Config instance (manager.config if None)
            require_signer: Whether a signer is needed (False for quotes only)
            dry_run: If True, quote and encode the trade without sending anything
        """
        self.manager = manager or Web3Manager(config, require_signer=require_signer)
        self.config = config or self.manager.config
        self.dry_run = dry_run

        self.pools = PoolStateReader(self.manager, self.config)
        self.quoter = Quoter(self.manager, self.config.contracts.quoter)
        self.tx_builder = TransactionBuilder(self.manager, GasManager(self.manager, self.config))
        self.router = Router(self.manager, self.config.contracts.router, self.tx_builder)

    def fetch_quote(self):
        """
        Quote `quote_amount_units` whole token0 for token1 via QuoterV2.

        Returns:
            Quote

        Raises:
            PoolNotFoundError: If the pool is not deployed
            QuoteError: If the quoter reverts or quotes zero output
        """
        token_in = self.config.token0
        token_out = self.config.token1

        _, pool = self.pools.get_pool()
        route = Route(pool, token_in, token_out)
        amount_in = self.config.quote_amount_units * 10 ** token_in.decimals

        output = self.quoter.quote_exact_input_single(token_in, token_out, amount_in, pool.fee_units)
        if output.returned_amount == 0:
            raise QuoteError(
                f"Quote for {amount_in} {token_in.symbol} returns 0 {token_out.symbol}; check pool liquidity"
            )
        return Quote(route, amount_in, output)

    def _quote_report(self, quote):
        token_in = quote.route.token_in
        token_out = quote.route.token_out
        pool = quote.route.pool
        after_price = sqrt_price_x96_to_price(
            quote.output.after_sqrt_p, pool.token0.decimals, pool.token1.decimals
        )
        return {
            "pool": pool.address,
            "fee_units": int(pool.fee_units),
            "token_in": {
                "symbol": token_in.symbol,
                "address": token_in.address,
                "amount": format_units(quote.input_amount, token_in.decimals),
                "amount_raw": str(quote.input_amount),
            },
            "token_out": {
                "symbol": token_out.symbol,
                "address": token_out.address,
                "amount": format_units(quote.output_amount, token_out.decimals),
                "amount_raw": str(quote.output_amount),
            },
            "price_after": {
                "base": pool.token0.symbol,
                "quote": pool.token1.symbol,
                "price": after_price,
                "formatted": f"1 {pool.token0.symbol} = {after_price:.6f} {pool.token1.symbol}",
            },
            "initialized_ticks_crossed": quote.output.initialized_ticks_crossed,
            "gas_estimate": quote.output.gas_estimate,
        }

    def get_quote(self):
        """
        Quote a swap without executing.

        Returns:
            OperationResult whose details hold the amounts, post-swap price
            and the Quote object under "quote"
        """
        try:
            quote = self.fetch_quote()
        except ElasticError as e:
            logger.error("quote failed: %s", e)
            return OperationResult.failure("quote", e)

        report = self._quote_report(quote)
        logger.info("Quote: %s %s -> %s %s", report["token_in"]["amount"], report["token_in"]["symbol"],
                    report["token_out"]["amount"], report["token_out"]["symbol"])
        return OperationResult.success("quote", quote=quote, **report)

    def execute_trade(self, quote=None):
        """
        Swap the quoted input for at least output / (1 + slippage).

        Args:
            quote: Quote to trade (fetched if None)

        Returns:
            OperationResult with the swap tx hash and amounts
        """
        try:
            return self._execute_trade(quote)
        except ElasticError as e:
            logger.error("swap failed: %s", e)
            return OperationResult.failure("swap", e)

    def _execute_trade(self, quote):
        if quote is None:
            quote = self.fetch_quote()

        trade = Trade.from_quote(quote)
        minimum_out = trade.minimum_amount_out(self.config.slippage_bps)
        report = self._quote_report(quote)
        report["token_out"]["min_amount"] = format_units(minimum_out, trade.route.token_out.decimals)
        report["token_out"]["min_amount_raw"] = str(minimum_out)
        report["slippage_bps"] = self.config.slippage_bps

        params = swap_call_parameters(
            trade,
            SwapOptions(
                recipient=self.manager.address,
                slippage_bps=self.config.slippage_bps,
                deadline=int(time.time()) + self.config.deadline_seconds,
            ),
            minimum_amount_out=minimum_out,
        )

        token_in = ERC20(self.manager, trade.route.token_in.address, self.tx_builder)
        if self.dry_run:
            allowance = token_in.allowance(self.router.address)
            report["approval"] = {
                "allowance": str(allowance),
                "required": str(trade.input_amount),
                "needs_approval": allowance < trade.input_amount,
            }
            report["calldata"] = params.calldata_hex
            report["dry_run"] = True
            return OperationResult.success("swap", **report)

        approval = token_in.approve(self.router.address, trade.input_amount)
        if approval is not None:
            report["approval"] = {"tx_hash": Web3.to_hex(approval["transactionHash"])}

        receipt = self.router.submit(params, "swap")
        report["block"] = receipt.get("blockNumber")
        report["gas_used"] = receipt.get("gasUsed")
        tx_hash = Web3.to_hex(receipt["transactionHash"])
        logger.info("Swap mined: %s", tx_hash)
        return OperationResult.success("swap", tx_hash=tx_hash, **report)
