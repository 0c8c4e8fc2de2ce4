"""Genesis import and export and message and proposal routing of the cointrunk module."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..errors import UnknownRequestError
from ..store import Context, EventManager
from .keeper import Keeper
from .keys import MODULE_NAME
from .messages import (
    AcceptedDomainProposal,
    MsgAddArticle,
    MsgPayPublisherRespect,
    PublisherProposal,
)
from .msg_server import MsgServer
from .state import GenesisState, default_genesis


def init_genesis(ctx: Context, keeper: Keeper, gen_state: GenesisState) -> None:
    """Load the module's state from a genesis state."""
    keeper.set_params(ctx, gen_state.params)
    keeper.set_article_counter(ctx, gen_state.articles_counter)
    for publisher in gen_state.publisher_list:
        keeper.set_publisher(ctx, publisher)
    for accepted_domain in gen_state.accepted_domain_list:
        keeper.set_accepted_domain(ctx, accepted_domain)
    for article in gen_state.article_list:
        keeper.set_article(ctx, article)


def export_genesis(ctx: Context, keeper: Keeper) -> GenesisState:
    """Dump the module's state as a genesis state."""
    genesis = default_genesis()
    genesis.params = keeper.get_params(ctx)
    genesis.publisher_list = keeper.get_all_publishers(ctx)
    genesis.accepted_domain_list = keeper.get_all_accepted_domains(ctx)
    genesis.article_list = keeper.get_all_articles(ctx)
    genesis.articles_counter = keeper.get_article_counter(ctx)
    return genesis


def new_handler(keeper: Keeper) -> Callable[[Context, Any], tuple[Any, tuple]]:
    """A handler that runs a message and returns its response and emitted events."""
    server = MsgServer(keeper)

    def handle(ctx: Context, msg: Any) -> tuple[Any, tuple]:
        ctx = ctx.with_event_manager(EventManager())
        if isinstance(msg, MsgAddArticle):
            response = server.add_article(ctx, msg)
        elif isinstance(msg, MsgPayPublisherRespect):
            response = server.pay_publisher_respect(ctx, msg)
        else:
            raise UnknownRequestError(
                f"unrecognized {MODULE_NAME} message type: {type(msg).__name__}"
            )
        return response, ctx.event_manager.events

    return handle


def new_proposal_handler(keeper: Keeper) -> Callable[[Context, Any], None]:
    """A handler that applies passed governance proposals of this module."""

    def handle(ctx: Context, content: Any) -> None:
        if isinstance(content, PublisherProposal):
            keeper.handle_publisher_proposal(ctx, content)
        elif isinstance(content, AcceptedDomainProposal):
            keeper.handle_accepted_domain_proposal(ctx, content)
        else:
            raise UnknownRequestError(
                f"unrecognized cointrunk proposal content type: {type(content).__name__}"
            )

    return handle