# bzemods

`bzemods` runs the state machine of **cointrunk**, a curated news-feed chain module, entirely in memory.

* Governance proposals register publishers and accepted domains.
* Articles may link only to accepted, active domains.
* An article from an unregistered or inactive publisher is a paid article. Paid articles are capped each month and cost a fee that goes to the community pool.
* Anyone can pay "respect" to a publisher. A tax on that payment also goes to the community pool.

The package also models the chain pieces the module depends on. These are an ordered key/value store with prefixed views and pagination, typed events, bech32 account addresses, coins, a bank and a community pool. With them you can drive the module from tests or scripts without running a node.

## Installation

```
pip install .
```

To install the test dependencies as well, use `pip install .[test]`.

## Layout

| Module | Contents |
| --- | --- |
| `bzemods.errors` | `SdkError` and its subclasses, `QueryError`, `StatusCode` |
| `bzemods.chain` | `bech32_encode`, `bech32_decode`, `acc_address_from_bech32`, `address_to_bech32`, `module_address`, `validate_denom`, `Coin`, `parse_coin_normalized`, `parse_coins_normalized`, `Bank`, `Distribution` |
| `bzemods.store` | `KVStore`, `PrefixStore`, `PageRequest`, `PageResponse`, `ListRequest`, `IndexRequest`, `PagedResult`, `paginate`, `encode_record`, `decode_record`, `Event`, `EventManager`, `Context` |
| `bzemods.cointrunk.keys` | Store key prefixes, `accepted_domain_key`, `article_key`, `publisher_key`, `monthly_paid_article_counter_prefix` |
| `bzemods.cointrunk.params` | `Params`, `PublisherRespectParams`, `default_params()` and the validators |
| `bzemods.cointrunk.state` | `Publisher`, `AcceptedDomain`, `Article`, `AnonArticlesCounter`, `GenesisState`, `default_genesis()`, the event classes |
| `bzemods.cointrunk.messages` | `MsgAddArticle`, `MsgPayPublisherRespect`, `AcceptedDomainProposal`, `PublisherProposal`, `validate_abstract` |
| `bzemods.cointrunk.keeper` | `Keeper`: records, counters, parameters, proposal handling, queries |
| `bzemods.cointrunk.msg_server` | `MsgServer`, `PayPublisherRespectResult` |
| `bzemods.cointrunk.module` | `init_genesis`, `export_genesis`, `new_handler`, `new_proposal_handler` |

## Example

```python
from datetime import datetime, timezone

from bzemods.chain import Bank, Coin, Distribution, address_to_bech32
from bzemods.cointrunk.keeper import Keeper
from bzemods.cointrunk.messages import (
    AcceptedDomainProposal, MsgAddArticle, MsgPayPublisherRespect, PublisherProposal,
)
from bzemods.cointrunk.module import init_genesis, new_handler, new_proposal_handler
from bzemods.cointrunk.state import default_genesis
from bzemods.store import Context, IndexRequest, ListRequest

bank = Bank()
keeper = Keeper(bank=bank, distribution=Distribution(bank))
ctx = Context(block_time=datetime(2023, 1, 15, tzinfo=timezone.utc))
init_genesis(ctx, keeper, default_genesis())

publisher = address_to_bech32(bytes(20))
reader_raw = bytes([1] * 20)
reader = address_to_bech32(reader_raw)

propose = new_proposal_handler(keeper)
propose(ctx, AcceptedDomainProposal(title="Domain", description="Add it",
                                    domain="example.com", active=True))
propose(ctx, PublisherProposal(title="Publisher", description="Add them",
                               name="Alice", address=publisher, active=True))

handle = new_handler(keeper)
article, events = handle(ctx, MsgAddArticle(publisher=publisher,
                                            title="A headline long enough",
                                            url="https://example.com/story"))
# article.id == 1, article.paid is False: the publisher is registered and active

bank.mint(reader_raw, [Coin("ubze", 1000)])
result, _ = handle(ctx, MsgPayPublisherRespect(creator=reader, address=publisher,
                                               amount="1000ubze"))
# result.publisher_reward == 800, result.community_pool_funds == 200

page = keeper.all_articles(ctx, ListRequest())
alice = keeper.publisher_by_index(ctx, IndexRequest(index=publisher))
```

`new_handler` returns a callable. It runs a message under a fresh `EventManager` and returns the response together with the events emitted. `Keeper.set_params` validates the parameters before it stores them.

## Errors

An operation that the chain would reject raises an exception from `bzemods.errors`. Message, handler and proposal failures raise subclasses of `SdkError`: `InvalidAddressError`, `InvalidRequestError`, `InvalidCoinsError`, `InsufficientFundsError`, `UnknownRequestError` and `InvalidProposalContentError`. Query methods on `Keeper` raise `QueryError` instead. It carries a `StatusCode` and a message, and it does not derive from `SdkError`. Address, coin and URL parsing helpers raise `ValueError`.

## What this package does not do

* There is no command-line tool, network node, REST or gRPC server.
* State lives only in memory, in the `KVStore` objects held by a `Context`. Nothing is written to disk.
* The `bzemods.scavenge` subpackage is empty. The commit–reveal puzzle game is not included.

## Running the tests

```
pytest
```