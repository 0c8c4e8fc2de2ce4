from datetime import datetime, timezone
from decimal import Decimal

import pytest

from bzemods.chain import Coin, address_to_bech32
from bzemods.cointrunk.keeper import Keeper
from bzemods.cointrunk.messages import AcceptedDomainProposal, PublisherProposal
from bzemods.cointrunk.params import Params, PublisherRespectParams, default_params
from bzemods.cointrunk.state import (
    AcceptedDomain,
    AcceptedDomainAddedEvent,
    AcceptedDomainUpdatedEvent,
    AnonArticlesCounter,
    Article,
    Publisher,
    PublisherAddedEvent,
    PublisherUpdatedEvent,
)
from bzemods.errors import QueryError, StatusCode
from bzemods.store import Context, IndexRequest, ListRequest, PageRequest

BLOCK_TIME = datetime(2023, 1, 15, 12, 0, tzinfo=timezone.utc)
ADDRESS_A = address_to_bech32(b"\x01" * 20)
ADDRESS_B = address_to_bech32(b"\x02" * 20)


@pytest.fixture
def keeper():
    return Keeper()


@pytest.fixture
def ctx():
    return Context(block_time=BLOCK_TIME)


def test_get_params(keeper, ctx):
    params = default_params()
    keeper.set_params(ctx, params)
    assert keeper.get_params(ctx) == params
    assert keeper.anon_article_limit(ctx) == params.anon_article_limit
    assert keeper.anon_article_cost(ctx) == params.anon_article_cost


def test_params_query(keeper, ctx):
    params = default_params()
    keeper.set_params(ctx, params)
    assert keeper.params(ctx, object()) == params


def test_params_query_none_request(keeper, ctx):
    with pytest.raises(QueryError) as info:
        keeper.params(ctx, None)
    assert info.value == QueryError(StatusCode.INVALID_ARGUMENT, "invalid request")


def test_params_round_trip_values(keeper, ctx):
    params = Params(7, Coin("ubze", 12), PublisherRespectParams("ubze", Decimal("0.35")))
    keeper.set_params(ctx, params)
    assert keeper.publisher_respect_params(ctx).tax == Decimal("0.35")
    assert keeper.get_params(ctx) == params


def test_unset_params_raise(keeper, ctx):
    with pytest.raises(KeyError):
        keeper.anon_article_limit(ctx)


def test_invalid_params_rejected(keeper, ctx):
    params = Params(0, Coin("ubze", 1), PublisherRespectParams("ubze", Decimal("0.1")))
    with pytest.raises(ValueError):
        keeper.set_params(ctx, params)
    with pytest.raises(KeyError):
        keeper.anon_article_limit(ctx)


def test_publisher_set_get_all(keeper, ctx):
    first = Publisher(name="One", address=ADDRESS_A, active=True)
    second = Publisher(name="Two", address=ADDRESS_B, active=False, respect=3)
    keeper.set_publisher(ctx, first)
    keeper.set_publisher(ctx, second)
    assert keeper.get_publisher(ctx, ADDRESS_A) == first
    assert keeper.get_publisher(ctx, "missing") is None
    assert sorted(keeper.get_all_publishers(ctx), key=lambda p: p.name) == [first, second]


def test_accepted_domain_ignores_www(keeper, ctx):
    keeper.set_accepted_domain(ctx, AcceptedDomain(domain="example.com", active=True))
    assert keeper.get_accepted_domain(ctx, "www.example.com") == AcceptedDomain("example.com", True)
    assert keeper.get_accepted_domain(ctx, "other.com") is None
    assert keeper.get_all_accepted_domains(ctx) == [AcceptedDomain("example.com", True)]


def test_set_article_numbers_articles(keeper, ctx):
    original = Article(title="A title here", url="https://example.com/a")
    stored = keeper.set_article(ctx, original)
    assert stored.id == 1
    assert original.id == 0
    keeper.set_article(ctx, Article(title="Second", url="https://example.com/b"))
    assert keeper.get_article_counter(ctx) == 2
    assert [a.id for a in keeper.get_all_articles(ctx)] == [1, 2]


def test_set_article_keeps_existing_id(keeper, ctx):
    keeper.set_article(ctx, Article(id=42, title="T"))
    assert keeper.get_article_counter(ctx) == 0
    assert keeper.get_all_articles(ctx)[0].id == 42


def test_paid_articles_counted_per_month(keeper, ctx):
    keeper.set_article(ctx, Article(paid=True))
    keeper.set_article(ctx, Article(paid=True))
    keeper.set_article(ctx, Article(paid=False))
    assert keeper.get_monthly_paid_article_counter(ctx) == 2
    next_month = Context(block_time=datetime(2023, 2, 1, tzinfo=timezone.utc), stores=ctx.stores)
    assert keeper.get_monthly_paid_article_counter(next_month) == 0


def test_set_article_counter(keeper, ctx):
    keeper.set_article_counter(ctx, 10)
    assert keeper.get_article_counter(ctx) == 10
    assert keeper.set_article(ctx, Article()).id == 11


def test_publisher_proposal_adds_then_updates(keeper, ctx):
    keeper.handle_publisher_proposal(
        ctx, PublisherProposal(title="t", description="d", name="Pub", address=ADDRESS_A, active=True)
    )
    added = keeper.get_publisher(ctx, ADDRESS_A)
    assert added == Publisher(
        name="Pub", address=ADDRESS_A, active=True, created_at=int(BLOCK_TIME.timestamp())
    )
    assert ctx.event_manager.of_type(PublisherAddedEvent) == [PublisherAddedEvent(added)]

    added.articles_count = 4
    keeper.set_publisher(ctx, added)
    keeper.handle_publisher_proposal(
        ctx, PublisherProposal(name="Renamed", address=ADDRESS_A, active=False)
    )
    updated = keeper.get_publisher(ctx, ADDRESS_A)
    assert (updated.name, updated.active, updated.articles_count) == ("Renamed", False, 4)
    assert ctx.event_manager.of_type(PublisherUpdatedEvent) == [PublisherUpdatedEvent(updated)]


def test_publisher_proposal_bad_address(keeper, ctx):
    with pytest.raises(ValueError):
        keeper.handle_publisher_proposal(ctx, PublisherProposal(name="x", address="invalid_address"))
    assert keeper.get_all_publishers(ctx) == []


def test_accepted_domain_proposal_events(keeper, ctx):
    keeper.handle_accepted_domain_proposal(ctx, AcceptedDomainProposal(domain="example.com", active=True))
    keeper.handle_accepted_domain_proposal(ctx, AcceptedDomainProposal(domain="example.com", active=False))
    assert keeper.get_accepted_domain(ctx, "example.com") == AcceptedDomain("example.com", False)
    events = ctx.event_manager.events
    assert events == (
        AcceptedDomainAddedEvent(AcceptedDomain("example.com", True)),
        AcceptedDomainUpdatedEvent(AcceptedDomain("example.com", False)),
    )


def test_all_articles_paginated_by_key(keeper, ctx):
    for n in range(5):
        keeper.set_article(ctx, Article(title=f"t{n}"))
    first = keeper.all_articles(ctx, ListRequest(PageRequest(limit=2)))
    assert [a.id for a in first.items] == [1, 2]
    second = keeper.all_articles(ctx, ListRequest(PageRequest(key=first.pagination.next_key, limit=2)))
    assert [a.id for a in second.items] == [3, 4]


def test_all_articles_total(keeper, ctx):
    for _ in range(3):
        keeper.set_article(ctx, Article())
    result = keeper.all_articles(ctx, ListRequest())
    assert result.pagination.total == 3
    assert len(result.items) == 3


def test_list_queries_reject_none(keeper, ctx):
    for query in (keeper.all_articles, keeper.publisher, keeper.accepted_domain,
                  keeper.all_anon_articles_counters):
        with pytest.raises(QueryError) as info:
            query(ctx, None)
        assert info.value.code is StatusCode.INVALID_ARGUMENT


def test_bad_pagination_is_internal_error(keeper, ctx):
    with pytest.raises(QueryError) as info:
        keeper.publisher(ctx, ListRequest(PageRequest(key=b"x", offset=1)))
    assert info.value.code is StatusCode.INTERNAL


def test_publisher_and_domain_queries(keeper, ctx):
    keeper.set_publisher(ctx, Publisher(name="One", address=ADDRESS_A))
    keeper.set_accepted_domain(ctx, AcceptedDomain("example.com", True))
    assert keeper.publisher(ctx, ListRequest()).items == [Publisher(name="One", address=ADDRESS_A)]
    assert keeper.accepted_domain(ctx, ListRequest()).items == [AcceptedDomain("example.com", True)]


def test_anon_articles_counters_query(keeper, ctx):
    keeper.set_article(ctx, Article(paid=True))
    keeper.set_article(ctx, Article(paid=True))
    result = keeper.all_anon_articles_counters(ctx, ListRequest())
    assert result.items == [AnonArticlesCounter(key="202301counter/", counter=2)]


def test_publisher_by_index(keeper, ctx):
    keeper.set_publisher(ctx, Publisher(name="One", address=ADDRESS_A))
    assert keeper.publisher_by_index(ctx, IndexRequest(ADDRESS_A)).name == "One"
    with pytest.raises(QueryError) as info:
        keeper.publisher_by_index(ctx, IndexRequest("100000"))
    assert info.value == QueryError(StatusCode.INVALID_ARGUMENT, "not found")
    with pytest.raises(QueryError) as info:
        keeper.publisher_by_index(ctx, None)
    assert info.value == QueryError(StatusCode.INVALID_ARGUMENT, "invalid request")