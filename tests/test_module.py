from datetime import datetime, timezone

import pytest

from bzemods.chain import Bank, Coin, Distribution, address_to_bech32
from bzemods.cointrunk.keeper import Keeper
from bzemods.cointrunk.messages import (
    AcceptedDomainProposal,
    MsgAddArticle,
    PublisherProposal,
)
from bzemods.cointrunk.module import (
    export_genesis,
    init_genesis,
    new_handler,
    new_proposal_handler,
)
from bzemods.cointrunk.params import default_params
from bzemods.cointrunk.state import (
    AcceptedDomain,
    AcceptedDomainAddedEvent,
    Article,
    ArticleAddedEvent,
    GenesisState,
    Publisher,
    PublisherAddedEvent,
)
from bzemods.errors import UnknownRequestError
from bzemods.store import Context

PUBLISHER_RAW = bytes([3]) * 20
PUBLISHER = address_to_bech32(PUBLISHER_RAW)


@pytest.fixture
def env():
    bank = Bank()
    keeper = Keeper(bank=bank, distribution=Distribution(bank))
    ctx = Context(block_time=datetime(2023, 6, 1, tzinfo=timezone.utc))
    return keeper, ctx


def test_genesis_default_params(env):
    keeper, ctx = env
    genesis_state = GenesisState(params=default_params())
    init_genesis(ctx, keeper, genesis_state)
    got = export_genesis(ctx, keeper)
    assert got.params == genesis_state.params
    assert got.publisher_list == []
    assert got.article_list == []


def test_genesis_round_trip(env):
    keeper, ctx = env
    state = GenesisState(
        params=default_params(),
        publisher_list=[Publisher(name="n", address=PUBLISHER, active=True, respect=7)],
        accepted_domain_list=[AcceptedDomain("example.com", True)],
        article_list=[
            Article(id=1, title="t", url="https://example.com/a", publisher=PUBLISHER),
            Article(id=2, title="u", url="https://example.com/b", publisher=PUBLISHER),
        ],
        articles_counter=2,
    )
    init_genesis(ctx, keeper, state)
    got = export_genesis(ctx, keeper)
    assert got == state


def test_genesis_numbers_articles_without_id(env):
    keeper, ctx = env
    state = GenesisState(
        params=default_params(),
        article_list=[Article(title="t", url="https://example.com/a", paid=True)],
        articles_counter=4,
    )
    init_genesis(ctx, keeper, state)
    got = export_genesis(ctx, keeper)
    assert got.articles_counter == 5
    assert [a.id for a in got.article_list] == [5]
    assert keeper.get_monthly_paid_article_counter(ctx) == 1


def test_handler_routes_add_article(env):
    keeper, ctx = env
    init_genesis(
        ctx,
        keeper,
        GenesisState(
            params=default_params(),
            publisher_list=[Publisher(name="n", address=PUBLISHER, active=True)],
            accepted_domain_list=[AcceptedDomain("example.com", True)],
        ),
    )
    handler = new_handler(keeper)
    msg = MsgAddArticle(publisher=PUBLISHER, title="A long enough title", url="https://example.com/x")
    response, events = handler(ctx, msg)
    assert response.url == msg.url
    assert [type(e) for e in events] == [ArticleAddedEvent]
    assert ctx.event_manager.events == ()


def test_handler_rejects_unknown_message(env):
    keeper, ctx = env
    handler = new_handler(keeper)
    with pytest.raises(UnknownRequestError, match="unrecognized cointrunk message type"):
        handler(ctx, Coin("ubze", 1))


def test_proposal_handler_adds_publisher(env):
    keeper, ctx = env
    handler = new_proposal_handler(keeper)
    handler(ctx, PublisherProposal(title="t", description="d", name="n", address=PUBLISHER))
    publisher = keeper.get_publisher(ctx, PUBLISHER)
    assert publisher.name == "n"
    assert publisher.active is True
    assert publisher.created_at == int(ctx.block_time.timestamp())
    assert len(ctx.event_manager.of_type(PublisherAddedEvent)) == 1


def test_proposal_handler_adds_domain(env):
    keeper, ctx = env
    handler = new_proposal_handler(keeper)
    handler(ctx, AcceptedDomainProposal(title="t", description="d", domain="example.com", active=False))
    assert keeper.get_accepted_domain(ctx, "example.com") == AcceptedDomain("example.com", False)
    assert len(ctx.event_manager.of_type(AcceptedDomainAddedEvent)) == 1


def test_proposal_handler_rejects_unknown_content(env):
    keeper, ctx = env
    handler = new_proposal_handler(keeper)
    with pytest.raises(UnknownRequestError, match="unrecognized cointrunk proposal content type"):
        handler(ctx, MsgAddArticle())