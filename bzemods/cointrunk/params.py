"""Parameters of the cointrunk module and their validation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..chain import Coin, validate_denom

DEFAULT_DENOM = "ubze"
DEFAULT_ANON_ARTICLE_COST_AMOUNT = 25000000000

KEY_ANON_ARTICLE_LIMIT = b"AnonArticleLimit"
KEY_ANON_ARTICLE_COST = b"AnonArticleCost"
KEY_PUBLISHER_RESPECT_PARAMS = b"PublisherRespectParams"

DEFAULT_ANON_ARTICLE_LIMIT = 5
DEFAULT_ANON_ARTICLE_COST = Coin(DEFAULT_DENOM, DEFAULT_ANON_ARTICLE_COST_AMOUNT)


@dataclass(frozen=True)
class PublisherRespectParams:
    """The denomination respect is paid in and the share taken as tax."""

    denom: str
    tax: Decimal


DEFAULT_PUBLISHER_RESPECT_PARAMS = PublisherRespectParams(DEFAULT_DENOM, Decimal("0.20"))


def validate_anon_article_limit(value: Any) -> None:
    """Raise unless the limit is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"invalid parameter type: {type(value).__name__}")
    if value < 1:
        raise ValueError(
            f"invalid anonArticleLimit. Expected uint64 higher than 0 received {value}"
        )


def validate_anon_article_cost(value: Any) -> None:
    """Raise unless the cost is a valid coin."""
    if not isinstance(value, Coin):
        raise TypeError(f"invalid parameter anonArticleLimit type: {type(value).__name__}")
    if not value.is_valid():
        raise ValueError(f"invalid anonArticleLimit coin: {value}")


def validate_publisher_respect_params(value: Any) -> None:
    """Raise unless the tax is not negative and the denomination is well formed."""
    if not isinstance(value, PublisherRespectParams):
        raise TypeError(
            f"invalid parameter publisherRespectParams type: {type(value).__name__}"
        )
    if value.tax < 0:
        raise ValueError(f"publisherRespectParams tax should be positive: {value.tax}")
    validate_denom(value.denom)


@dataclass(frozen=True)
class Params:
    """The module's parameter set."""

    anon_article_limit: int
    anon_article_cost: Coin
    publisher_respect_params: PublisherRespectParams

    def validate(self) -> None:
        """Raise on the first parameter that is not acceptable."""
        validate_anon_article_limit(self.anon_article_limit)
        validate_anon_article_cost(self.anon_article_cost)
        validate_publisher_respect_params(self.publisher_respect_params)


def default_params() -> Params:
    """The parameters a new chain starts with."""
    return Params(
        DEFAULT_ANON_ARTICLE_LIMIT,
        DEFAULT_ANON_ARTICLE_COST,
        DEFAULT_PUBLISHER_RESPECT_PARAMS,
    )