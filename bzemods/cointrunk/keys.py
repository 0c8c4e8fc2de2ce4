"""Module names and store keys of the cointrunk module."""

from __future__ import annotations

from datetime import datetime

MODULE_NAME = "cointrunk"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME
MEM_STORE_KEY = "mem_cointrunk"

ACCEPTED_DOMAIN_KEY_PREFIX = "AcceptedDomain/value/"
ARTICLE_KEY_PREFIX = "Article/value/"
ARTICLE_COUNTER_KEY_PREFIX = "Article/counter/"
ANON_ARTICLES_COUNTER_KEY_PREFIX = "Article/anon/counter/"
PUBLISHER_KEY_PREFIX = "Publisher/value/"

_WWW = "www."


def _index_key(index: str) -> bytes:
    return index.encode() + b"/"


def accepted_domain_key(index: str) -> bytes:
    """Store key of an accepted domain; a leading 'www.' is ignored."""
    if index.startswith(_WWW):
        index = index[len(_WWW):]
    return _index_key(index)


def article_key(index: str) -> bytes:
    """Store key of an article, or of a counter, from its index."""
    return _index_key(index)


def publisher_key(index: str) -> bytes:
    """Store key of a publisher from its address."""
    return _index_key(index)


def monthly_paid_article_counter_prefix(block_time: datetime) -> str:
    """Prefix of the paid-article counter for the month of the given block time."""
    return ANON_ARTICLES_COUNTER_KEY_PREFIX + block_time.strftime("%Y%m")