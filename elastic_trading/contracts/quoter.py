"""Elastic QuoterV2 contract wrapper"""

import logging

from eth_abi.exceptions import DecodingError
from web3.exceptions import Web3Exception

from ..core.exceptions import QuoteError
from ..pricing.encoding import decode_quote_output, quote_call_parameters

logger = logging.getLogger(__name__)


class Quoter:
    """
    Wrapper for the Elastic QuoterV2 contract.

    Provides swap quotes via eth_call without executing transactions.
    """

    def __init__(self, manager, address):
        """
        Args:
            manager: Web3Manager instance
            address: QuoterV2 address
        """
        self.manager = manager
        self.address = manager.checksum(address)

    def quote_exact_input_single(self, token_in, token_out, amount_in, fee_units, limit_sqrt_p=0):
        """
        Quote an exact input swap through a single pool.

        Args:
            token_in: Input Token
            token_out: Output Token
            amount_in: Exact amount of input token (raw units)
            fee_units: Pool fee tier
            limit_sqrt_p: Price limit (0 for no limit)

        Returns:
            QuoteOutput

        Raises:
            QuoteError: If the quoter reverts or returns undecodable data
        """
        params = quote_call_parameters(token_in, token_out, fee_units, amount_in, limit_sqrt_p)
        try:
            data = self.manager.call(self.address, params.calldata)
            output = decode_quote_output(data)
        except (Web3Exception, DecodingError, ValueError) as e:
            raise QuoteError(f"Failed to get quote: {e}") from e

        logger.debug("Quote %d %s -> %d %s", output.used_amount, token_in.symbol,
                     output.returned_amount, token_out.symbol)
        return output
