"""Fixtures wiring the fakes into real RpcClient and IndexerClient instances."""

from __future__ import annotations

import httpx
import pytest

from accesscore import IndexerClient, RpcClient

from fakes import FakeChain, FakeIndexer, make_indexer


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def rpc(chain: FakeChain) -> RpcClient:
    return RpcClient("http://node.test", http_client=httpx.AsyncClient(transport=httpx.MockTransport(chain.handler)))


@pytest.fixture
def fake_indexer() -> FakeIndexer:
    return FakeIndexer()


@pytest.fixture
def indexer(fake_indexer: FakeIndexer) -> IndexerClient:
    return make_indexer(fake_indexer)
