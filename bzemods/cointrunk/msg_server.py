"""Transaction handling of the cointrunk module: adding articles and paying respect."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext

from ..chain import Coin, acc_address_from_bech32, parse_coin_normalized
from ..errors import InvalidRequestError, SdkError
from ..store import Context
from .keeper import Keeper
from .messages import MsgAddArticle, MsgPayPublisherRespect
from .state import Article, ArticleAddedEvent, PublisherRespectPaidEvent

_DECIMAL_PRECISION = 120


@dataclass(frozen=True)
class PayPublisherRespectResult:
    """How a respect payment was split between the publisher and the community pool."""

    respect_paid: int
    publisher_reward: int
    community_pool_funds: int


class MsgServer:
    """Executes the module's transaction messages against a keeper."""

    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper

    def add_article(self, ctx: Context, msg: MsgAddArticle) -> Article:
        """Publish an article, charging for it unless the publisher is active.

        Returns the article as it was stored, numbered.
        """
        try:
            self._validate_message_domains(ctx, msg)
        except ValueError as err:
            raise InvalidRequestError(f"invalid domain ({err})") from err

        publisher = self.keeper.get_publisher(ctx, msg.publisher)
        paid = publisher is None or not publisher.active
        if paid:
            limit = self.keeper.anon_article_limit(ctx)
            if self.keeper.get_monthly_paid_article_counter(ctx) >= limit:
                raise InvalidRequestError("Paid article limit reached for current period")
            cost = self.keeper.anon_article_cost(ctx)
            coins = (cost,) if cost.is_positive() else ()
            publisher_acc = acc_address_from_bech32(msg.publisher)
            self.keeper.distribution.fund_community_pool(ctx, coins, publisher_acc)

        article = Article(
            id=0,
            title=msg.title,
            url=msg.url,
            picture=msg.picture,
            publisher=msg.publisher,
            paid=paid,
            created_at=int(ctx.block_time.timestamp()),
        )
        stored = self.keeper.set_article(ctx, article)

        if publisher is not None:
            publisher.articles_count += 1
            self.keeper.set_publisher(ctx, publisher)

        ctx.event_manager.emit(
            ArticleAddedEvent(
                article_id=article.id,
                publisher=article.publisher,
                paid=article.paid,
            )
        )
        return stored

    def _check_domain(self, ctx: Context, uri: str, msg: MsgAddArticle, what: str) -> None:
        try:
            parsed = msg.parse_url(uri)
        except ValueError as err:
            label = "url" if what == "url" else "picture url"
            raise ValueError(f"Invalid article {label}({err})") from err
        accepted = self.keeper.get_accepted_domain(ctx, parsed.host)
        if accepted is None:
            raise ValueError(
                f"Provided {what} domain ({parsed.host}) is not an accepted domain"
            )
        if not accepted.active:
            raise ValueError(f"Provided {what} domain ({parsed.host}) is NOT active")

    def _validate_message_domains(self, ctx: Context, msg: MsgAddArticle) -> None:
        self._check_domain(ctx, msg.url, msg, "url")
        if msg.picture:
            self._check_domain(ctx, msg.picture, msg, "picture")

    def pay_publisher_respect(
        self, ctx: Context, msg: MsgPayPublisherRespect
    ) -> PayPublisherRespectResult:
        """Pay a publisher, sending the taxed share to the community pool."""
        try:
            coin = parse_coin_normalized(msg.amount)
        except ValueError as err:
            raise InvalidRequestError(f"invalid amount ({err})") from err

        params = self.keeper.publisher_respect_params(ctx)
        if coin.denom != params.denom:
            raise InvalidRequestError(
                f"invalid coin denom. Accepted ({params.denom}) got ({coin.denom})"
            )
        if not coin.is_positive():
            raise InvalidRequestError("invalid coin amount (amount should be positive)")

        publisher = self.keeper.get_publisher(ctx, msg.address)
        if publisher is None:
            raise InvalidRequestError(f"publisher ({msg.address}) could not be found")

        try:
            publisher_acc = acc_address_from_bech32(publisher.address)
        except ValueError as err:
            raise InvalidRequestError(f"could not get publisher account ({err})") from err
        try:
            creator_acc = acc_address_from_bech32(msg.creator)
        except ValueError as err:
            raise InvalidRequestError(f"invalid creator account ({err})") from err

        total = coin.amount
        with localcontext() as decimal_context:
            decimal_context.prec = _DECIMAL_PRECISION
            tax_amount = int(params.tax * Decimal(total))
        if tax_amount < 0:
            raise InvalidRequestError("invalid tax amount (is negative)")

        publisher_amount = total - tax_amount
        if publisher_amount <= 0:
            raise InvalidRequestError("invalid publisher amount (is not positive)")

        reward = Coin(coin.denom, publisher_amount)
        self.keeper.bank.send_coins(ctx, creator_acc, publisher_acc, (reward,))

        tax_paid = Coin(coin.denom, tax_amount)
        if not tax_paid.is_zero():
            try:
                self.keeper.distribution.fund_community_pool(ctx, (tax_paid,), creator_acc)
            except SdkError as err:
                raise InvalidRequestError(f"Could not fund community pool ({err})") from err

        publisher.respect += total
        self.keeper.set_publisher(ctx, publisher)

        ctx.event_manager.emit(
            PublisherRespectPaidEvent(
                publisher=publisher.address,
                respect_paid=total,
                community_pool_funds=tax_paid.amount,
                publisher_reward=reward.amount,
            )
        )
        return PayPublisherRespectResult(
            respect_paid=total,
            publisher_reward=reward.amount,
            community_pool_funds=tax_paid.amount,
        )