"""
Tests for open position lookup through the subgraph.
"""

import pytest
import requests

from elastic_trading.core.exceptions import NoOpenPositionError, SubgraphError
from elastic_trading.operations.positions import PositionIndex, PositionRecord

from .conftest import OWNER, FakeSession, position_item

POOL = "0x00000000000000000000000000000000000000bb"


class PagedSession(FakeSession):
    """Serves one page of positions per request"""

    def __init__(self, pages):
        super().__init__()
        self.pages = list(pages)

    def post(self, url, json=None, timeout=None):
        self.positions = self.pages.pop(0)
        return super().post(url, json=json, timeout=timeout)


@pytest.fixture
def index(config, session):
    return PositionIndex(config, session)


class TestOpenPositions:

    def test_sorted_by_id(self, index, session):
        session.positions = [
            position_item(7, 100, -60, 60),
            position_item(3, 200, -120, 120),
            position_item(5, 300, -180, 180),
        ]
        records = index.get_open_positions(OWNER, POOL)
        assert [r.position_id for r in records] == [3, 5, 7]
        assert records[0] == PositionRecord(3, 200, -120, 120)

    def test_closed_positions_skipped(self, index, session):
        session.positions = [position_item(1, 0, -60, 60), position_item(2, 5, -60, 60)]
        assert [r.position_id for r in index.get_open_positions(OWNER, POOL)] == [2]

    def test_query_uses_lowercase_addresses(self, index, session):
        index.get_open_positions(OWNER, POOL)
        assert OWNER.lower() in session.queries[0]
        assert POOL.lower() in session.queries[0]

    def test_follows_pages(self, config):
        first_page = [position_item(i, 1, -60, 60) for i in range(1000, 2000)]
        session = PagedSession([first_page, [position_item(5, 1, -60, 60), position_item(7, 0, -60, 60)]])
        records = PositionIndex(config, session).get_open_positions(OWNER, POOL)

        assert len(session.queries) == 2
        assert 'id_gt: ""' in session.queries[0]
        assert 'id_gt: "1999"' in session.queries[1]
        assert len(records) == 1001
        assert records[0].position_id == 5


class TestSelectPosition:

    def test_lowest_id_wins(self, index, session):
        session.positions = [position_item(9, 1, -60, 60), position_item(4, 1, -60, 60)]
        assert index.select_position(OWNER, POOL).position_id == 4

    def test_no_open_position(self, index, session):
        session.positions = [position_item(1, 0, -60, 60)]
        with pytest.raises(NoOpenPositionError):
            index.select_position(OWNER, POOL)


class TestErrors:

    def test_connection_error(self, index, session):
        session.error = requests.exceptions.ConnectionError("unreachable")
        with pytest.raises(SubgraphError):
            index.get_open_positions(OWNER, POOL)

    def test_graphql_errors(self, index, session):
        session.payload = {"errors": [{"message": "indexing error"}]}
        with pytest.raises(SubgraphError):
            index.get_open_positions(OWNER, POOL)

    def test_missing_data(self, index, session):
        session.payload = {}
        with pytest.raises(SubgraphError):
            index.get_open_positions(OWNER, POOL)

    def test_malformed_position(self, index, session):
        session.positions = [{"id": "1", "liquidity": "10"}]
        with pytest.raises(SubgraphError):
            index.get_open_positions(OWNER, POOL)
