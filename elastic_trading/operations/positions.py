"""Open position lookup through the Elastic subgraph"""

import logging
from dataclasses import dataclass
from typing import List

import requests
from web3 import Web3

from ..core.exceptions import NoOpenPositionError, SubgraphError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionRecord:
    """An open position as reported by the subgraph"""

    position_id: int
    liquidity: int
    tick_lower: int
    tick_upper: int


class PositionIndex:
    """
    GraphQL client for the Elastic subgraph.

    Only positions with non-zero liquidity are returned, ordered by
    ascending position id.
    """

    PAGE_SIZE = 1000

    # Paged by id (string order) with an id_gt cursor
    QUERY = """
{
  positions(first: %d, orderBy: id, orderDirection: asc,
            where: {owner: "%s", pool: "%s", id_gt: "%s"}) {
    id
    liquidity
    tickLower { tickIdx }
    tickUpper { tickIdx }
  }
}
"""

    def __init__(self, config, session=None):
        """
        Args:
            config: Config instance (subgraph_url, request_timeout)
            session: requests.Session to reuse (a new one if None)
        """
        self.config = config
        self.session = session or requests.Session()

    def _post(self, query):
        try:
            response = self.session.post(
                self.config.subgraph_url,
                json={"query": query},
                timeout=self.config.request_timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise SubgraphError(f"Subgraph request failed: {e}") from e

        if payload.get("errors"):
            raise SubgraphError(f"Subgraph returned errors: {payload['errors']}")
        data = payload.get("data")
        if data is None:
            raise SubgraphError("Subgraph response has no data")
        return data

    def get_open_positions(self, owner, pool_address) -> List[PositionRecord]:
        """
        Open positions of `owner` in `pool_address`.

        Raises:
            SubgraphError: If the subgraph is unreachable or the response is malformed
        """
        owner_key = Web3.to_checksum_address(owner).lower()
        pool_key = Web3.to_checksum_address(pool_address).lower()

        items = []
        last_id = ""
        while True:
            data = self._post(self.QUERY % (self.PAGE_SIZE, owner_key, pool_key, last_id))
            page = data.get("positions") or []
            items.extend(page)
            if len(page) < self.PAGE_SIZE:
                break
            try:
                last_id = page[-1]["id"]
            except (KeyError, TypeError) as e:
                raise SubgraphError(f"Malformed position in subgraph response: {e}") from e

        records = []
        try:
            for item in items:
                liquidity = int(item["liquidity"])
                if liquidity == 0:
                    continue
                records.append(PositionRecord(
                    position_id=int(item["id"]),
                    liquidity=liquidity,
                    tick_lower=int(item["tickLower"]["tickIdx"]),
                    tick_upper=int(item["tickUpper"]["tickIdx"]),
                ))
        except (KeyError, TypeError, ValueError) as e:
            raise SubgraphError(f"Malformed position in subgraph response: {e}") from e

        records.sort(key=lambda r: r.position_id)
        logger.info("Found %d open position(s) for %s in %s", len(records), owner, pool_address)
        return records

    def select_position(self, owner, pool_address) -> PositionRecord:
        """
        The open position a lifecycle operation acts on: the lowest id.

        Raises:
            NoOpenPositionError: If the owner has no open position in the pool
        """
        records = self.get_open_positions(owner, pool_address)
        if not records:
            raise NoOpenPositionError(f"No open position for {owner} in pool {pool_address}")
        selected = records[0]
        logger.info("Selected position %d (liquidity %d, ticks [%d, %d])", selected.position_id,
                    selected.liquidity, selected.tick_lower, selected.tick_upper)
        return selected
