"""Records, events and genesis state of the cointrunk module."""

from __future__ import annotations

from dataclasses import dataclass, field

from .params import Params, default_params

DEFAULT_INDEX = 1


@dataclass
class Publisher:
    """An account allowed to publish articles free of charge."""

    name: str = ""
    address: str = ""
    active: bool = False
    articles_count: int = 0
    created_at: int = 0
    respect: int = 0


@dataclass
class AcceptedDomain:
    """A domain articles and pictures may link to."""

    domain: str = ""
    active: bool = False


@dataclass
class Article:
    """A published link to an article."""

    id: int = 0
    title: str = ""
    url: str = ""
    picture: str = ""
    publisher: str = ""
    paid: bool = False
    created_at: int = 0


@dataclass
class AnonArticlesCounter:
    """How many paid articles were published under one monthly key."""

    key: str = ""
    counter: int = 0


@dataclass
class GenesisState:
    """The module's state at the start of a chain, or as exported."""

    params: Params = field(default_factory=default_params)
    publisher_list: list[Publisher] = field(default_factory=list)
    accepted_domain_list: list[AcceptedDomain] = field(default_factory=list)
    article_list: list[Article] = field(default_factory=list)
    articles_counter: int = 0

    def validate(self) -> None:
        """Raise if the state holds parameters that are not acceptable."""
        self.params.validate()


def default_genesis() -> GenesisState:
    """An empty state with the default parameters."""
    return GenesisState(params=default_params())


@dataclass
class PublisherAddedEvent:
    publisher: Publisher


@dataclass
class PublisherUpdatedEvent:
    publisher: Publisher


@dataclass
class AcceptedDomainAddedEvent:
    accepted_domain: AcceptedDomain


@dataclass
class AcceptedDomainUpdatedEvent:
    accepted_domain: AcceptedDomain


@dataclass
class ArticleAddedEvent:
    article_id: int
    publisher: str
    paid: bool


@dataclass
class PublisherRespectPaidEvent:
    publisher: str
    respect_paid: int
    community_pool_funds: int
    publisher_reward: int