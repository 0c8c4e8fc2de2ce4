"""State access, governance handling and queries of the cointrunk module."""

from __future__ import annotations

import dataclasses
import json
import logging
from decimal import Decimal
from typing import Any

from ..chain import Bank, Coin, Distribution, acc_address_from_bech32
from ..errors import QueryError, StatusCode
from ..store import (
    Context,
    IndexRequest,
    ListRequest,
    PagedResult,
    PrefixStore,
    decode_record,
    encode_record,
    key_prefix,
    paginate,
)
from .keys import (
    ACCEPTED_DOMAIN_KEY_PREFIX,
    ANON_ARTICLES_COUNTER_KEY_PREFIX,
    ARTICLE_COUNTER_KEY_PREFIX,
    ARTICLE_KEY_PREFIX,
    MODULE_NAME,
    PUBLISHER_KEY_PREFIX,
    STORE_KEY,
    accepted_domain_key,
    article_key,
    monthly_paid_article_counter_prefix,
    publisher_key,
)
from .messages import AcceptedDomainProposal, PublisherProposal
from .params import (
    KEY_ANON_ARTICLE_COST,
    KEY_ANON_ARTICLE_LIMIT,
    KEY_PUBLISHER_RESPECT_PARAMS,
    Params,
    PublisherRespectParams,
)
from .state import (
    AcceptedDomain,
    AcceptedDomainAddedEvent,
    AcceptedDomainUpdatedEvent,
    AnonArticlesCounter,
    Article,
    Publisher,
    PublisherAddedEvent,
    PublisherUpdatedEvent,
)

COUNTER_KEY = "counter"
PARAMS_STORE_KEY = "params"

_COUNTER_WIDTH = 8


def _invalid_request() -> QueryError:
    return QueryError(StatusCode.INVALID_ARGUMENT, "invalid request")


class Keeper:
    """Reads and writes the module's records, counters and parameters."""

    def __init__(
        self,
        store_key: str = STORE_KEY,
        bank: Bank | None = None,
        distribution: Distribution | None = None,
        params_store_key: str = PARAMS_STORE_KEY,
    ) -> None:
        self.store_key = store_key
        self.bank = bank
        self.distribution = distribution
        self.params_store_key = params_store_key
        self.logger = logging.getLogger(f"x/{MODULE_NAME}")

    def _store(self, ctx: Context, prefix: str) -> PrefixStore:
        return PrefixStore(ctx.kv_store(self.store_key), key_prefix(prefix))

    def _params_store(self, ctx: Context) -> PrefixStore:
        return PrefixStore(ctx.kv_store(self.params_store_key), key_prefix(MODULE_NAME + "/"))

    # Publishers

    def get_publisher(self, ctx: Context, index: str) -> Publisher | None:
        record = self._store(ctx, PUBLISHER_KEY_PREFIX).get(publisher_key(index))
        return None if record is None else decode_record(Publisher, record)

    def get_all_publishers(self, ctx: Context) -> list[Publisher]:
        store = self._store(ctx, PUBLISHER_KEY_PREFIX)
        return [decode_record(Publisher, value) for _, value in store.items()]

    def set_publisher(self, ctx: Context, publisher: Publisher) -> None:
        store = self._store(ctx, PUBLISHER_KEY_PREFIX)
        store.set(publisher_key(publisher.address), encode_record(publisher))

    # Accepted domains

    def get_accepted_domain(self, ctx: Context, index: str) -> AcceptedDomain | None:
        record = self._store(ctx, ACCEPTED_DOMAIN_KEY_PREFIX).get(accepted_domain_key(index))
        return None if record is None else decode_record(AcceptedDomain, record)

    def get_all_accepted_domains(self, ctx: Context) -> list[AcceptedDomain]:
        store = self._store(ctx, ACCEPTED_DOMAIN_KEY_PREFIX)
        return [decode_record(AcceptedDomain, value) for _, value in store.items()]

    def set_accepted_domain(self, ctx: Context, accepted_domain: AcceptedDomain) -> None:
        store = self._store(ctx, ACCEPTED_DOMAIN_KEY_PREFIX)
        store.set(accepted_domain_key(accepted_domain.domain), encode_record(accepted_domain))

    # Articles and counters

    def get_all_articles(self, ctx: Context) -> list[Article]:
        store = self._store(ctx, ARTICLE_KEY_PREFIX)
        return [decode_record(Article, value) for _, value in store.items()]

    def set_article(self, ctx: Context, article: Article) -> Article:
        """Store an article, numbering it if it has no id; returns what was stored.

        The caller's article is left untouched.
        """
        stored = dataclasses.replace(article)
        if stored.id == 0:
            stored.id = self._increment_counter(ctx, ARTICLE_COUNTER_KEY_PREFIX)
        store = self._store(ctx, ARTICLE_KEY_PREFIX)
        store.set(article_key(f"{stored.id:012d}"), encode_record(stored))
        if stored.paid:
            self._increment_counter(ctx, monthly_paid_article_counter_prefix(ctx.block_time))
        return stored

    def get_monthly_paid_article_counter(self, ctx: Context) -> int:
        return self._get_counter(ctx, monthly_paid_article_counter_prefix(ctx.block_time))

    def get_article_counter(self, ctx: Context) -> int:
        return self._get_counter(ctx, ARTICLE_COUNTER_KEY_PREFIX)

    def set_article_counter(self, ctx: Context, counter: int) -> None:
        self._write_counter(ctx, ARTICLE_COUNTER_KEY_PREFIX, counter)

    def _get_counter(self, ctx: Context, prefix: str) -> int:
        record = self._store(ctx, prefix).get(article_key(COUNTER_KEY))
        return 0 if record is None else int.from_bytes(record, "big")

    def _write_counter(self, ctx: Context, prefix: str, value: int) -> None:
        self._store(ctx, prefix).set(
            article_key(COUNTER_KEY), value.to_bytes(_COUNTER_WIDTH, "big")
        )

    def _increment_counter(self, ctx: Context, prefix: str) -> int:
        value = self._get_counter(ctx, prefix) + 1
        self._write_counter(ctx, prefix, value)
        return value

    # Parameters

    def get_params(self, ctx: Context) -> Params:
        return Params(
            self.anon_article_limit(ctx),
            self.anon_article_cost(ctx),
            self.publisher_respect_params(ctx),
        )

    def set_params(self, ctx: Context, params: Params) -> None:
        """Validate and store every parameter."""
        params.validate()
        store = self._params_store(ctx)
        cost = params.anon_article_cost
        respect = params.publisher_respect_params
        store.set(KEY_ANON_ARTICLE_LIMIT, json.dumps(params.anon_article_limit).encode())
        store.set(
            KEY_ANON_ARTICLE_COST,
            json.dumps({"denom": cost.denom, "amount": str(cost.amount)}).encode(),
        )
        store.set(
            KEY_PUBLISHER_RESPECT_PARAMS,
            json.dumps({"denom": respect.denom, "tax": str(respect.tax)}).encode(),
        )

    def _get_param(self, ctx: Context, key: bytes) -> Any:
        raw = self._params_store(ctx).get(key)
        if raw is None:
            raise KeyError(f"parameter {key.decode()} not set")
        return json.loads(raw)

    def anon_article_limit(self, ctx: Context) -> int:
        return int(self._get_param(ctx, KEY_ANON_ARTICLE_LIMIT))

    def anon_article_cost(self, ctx: Context) -> Coin:
        payload = self._get_param(ctx, KEY_ANON_ARTICLE_COST)
        return Coin(payload["denom"], int(payload["amount"]))

    def publisher_respect_params(self, ctx: Context) -> PublisherRespectParams:
        payload = self._get_param(ctx, KEY_PUBLISHER_RESPECT_PARAMS)
        return PublisherRespectParams(payload["denom"], Decimal(payload["tax"]))

    # Governance

    def handle_publisher_proposal(self, ctx: Context, proposal: PublisherProposal) -> None:
        """Add or update a publisher as an accepted proposal says."""
        acc_address_from_bech32(proposal.address)
        existing = self.get_publisher(ctx, proposal.address)
        if existing is None:
            publisher = Publisher(
                name=proposal.name,
                address=proposal.address,
                active=proposal.active,
                articles_count=0,
                created_at=int(ctx.block_time.timestamp()),
                respect=0,
            )
        else:
            publisher = dataclasses.replace(
                existing, name=proposal.name, active=proposal.active
            )
        self.set_publisher(ctx, publisher)
        if existing is None:
            ctx.event_manager.emit(PublisherAddedEvent(publisher=publisher))
        else:
            ctx.event_manager.emit(PublisherUpdatedEvent(publisher=publisher))

    def handle_accepted_domain_proposal(
        self, ctx: Context, proposal: AcceptedDomainProposal
    ) -> None:
        """Add or update an accepted domain as an accepted proposal says."""
        existing = self.get_accepted_domain(ctx, proposal.domain)
        accepted_domain = AcceptedDomain(domain=proposal.domain, active=proposal.active)
        self.set_accepted_domain(ctx, accepted_domain)
        if existing is None:
            ctx.event_manager.emit(AcceptedDomainAddedEvent(accepted_domain=accepted_domain))
        else:
            ctx.event_manager.emit(AcceptedDomainUpdatedEvent(accepted_domain=accepted_domain))

    # Queries

    def params(self, ctx: Context, request: Any) -> Params:
        """Answer a parameters query; any request object other than None is accepted."""
        if request is None:
            raise _invalid_request()
        return self.get_params(ctx)

    def _paged(self, store: PrefixStore, request: ListRequest | None, convert) -> PagedResult:
        if request is None:
            raise _invalid_request()
        try:
            page = paginate(store, request.pagination)
            items = [convert(key, value) for key, value in page.items]
        except (ValueError, KeyError, TypeError) as err:
            raise QueryError(StatusCode.INTERNAL, str(err)) from err
        return PagedResult(items, page.pagination)

    def accepted_domain(self, ctx: Context, request: ListRequest | None) -> PagedResult:
        return self._paged(
            self._store(ctx, ACCEPTED_DOMAIN_KEY_PREFIX),
            request,
            lambda _key, value: decode_record(AcceptedDomain, value),
        )

    def all_anon_articles_counters(
        self, ctx: Context, request: ListRequest | None
    ) -> PagedResult:
        return self._paged(
            self._store(ctx, ANON_ARTICLES_COUNTER_KEY_PREFIX),
            request,
            lambda key, value: AnonArticlesCounter(
                key=key.decode(), counter=int.from_bytes(value[:_COUNTER_WIDTH], "big")
            ),
        )

    def all_articles(self, ctx: Context, request: ListRequest | None) -> PagedResult:
        return self._paged(
            self._store(ctx, ARTICLE_KEY_PREFIX),
            request,
            lambda _key, value: decode_record(Article, value),
        )

    def publisher(self, ctx: Context, request: ListRequest | None) -> PagedResult:
        return self._paged(
            self._store(ctx, PUBLISHER_KEY_PREFIX),
            request,
            lambda _key, value: decode_record(Publisher, value),
        )

    def publisher_by_index(self, ctx: Context, request: IndexRequest | None) -> Publisher:
        if request is None:
            raise _invalid_request()
        found = self.get_publisher(ctx, request.index)
        if found is None:
            raise QueryError(StatusCode.INVALID_ARGUMENT, "not found")
        return found