"""Transaction messages and governance proposals of the cointrunk module."""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass
from urllib.parse import urlsplit

from ..chain import acc_address_from_bech32, parse_coin_normalized
from ..errors import (
    InvalidAddressError,
    InvalidCoinsError,
    InvalidProposalContentError,
    InvalidRequestError,
)
from .keys import ROUTER_KEY

TYPE_MSG_ADD_ARTICLE = "add_article"
TYPE_MSG_PAY_PUBLISHER_RESPECT = "pay_publisher_respect"
PROPOSAL_TYPE_ACCEPTED_DOMAIN = "AcceptedDomainProposal"
PROPOSAL_TYPE_PUBLISHER = "PublisherProposal"

MIN_TITLE_LENGTH = 10
MAX_TITLE_LENGTH = 140
MAX_URL_LENGTH = 2048
MAX_PROPOSAL_TITLE_LENGTH = 140
MAX_PROPOSAL_DESCRIPTION_LENGTH = 10000

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_HOST_CHARS = set(' <>"{}|\\^`')
_DOMAIN_RE = re.compile(
    r"(([a-zA-Z]{1})|([a-zA-Z]{1}[a-zA-Z]{1})|([a-zA-Z]{1}[0-9]{1})|([0-9]{1}[a-zA-Z]{1})"
    r"|([a-zA-Z0-9][a-zA-Z0-9_-]{1,61}[a-zA-Z0-9]))"
    r"\.([a-zA-Z]{2,6}|[a-zA-Z0-9-]{2,30}\.[a-zA-Z\n ]{2,3})"
)


def _sign_bytes(payload: dict) -> bytes:
    text = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(char, escaped)
    return text.encode()


@dataclass(frozen=True)
class ParsedUrl:
    """The parts of a request URL that the module looks at."""

    scheme: str
    host: str
    path: str
    query: str


def _parse_request_uri(uri: str) -> ParsedUrl:
    if not uri:
        raise ValueError("empty url")
    if _CONTROL_CHARS.search(uri):
        raise ValueError("invalid control character in URL")
    if uri.lstrip() != uri:
        raise ValueError("invalid URI for request")
    parts = urlsplit(uri, allow_fragments=False)
    rest = uri[len(parts.scheme) + 1:] if parts.scheme else uri
    if not rest.startswith("/"):
        raise ValueError("invalid URI for request")
    host = parts.netloc.rpartition("@")[2]
    bad = next((c for c in host if c in _BAD_HOST_CHARS), None)
    if bad is not None:
        raise ValueError(f"invalid character {bad!r} in host name")
    if parts.scheme != "https":
        raise ValueError("invalid url scheme: only https accepted")
    return ParsedUrl(parts.scheme, host, parts.path, parts.query)


@dataclass
class MsgAddArticle:
    """Publish a link to an article."""

    publisher: str = ""
    title: str = ""
    url: str = ""
    picture: str = ""

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_ADD_ARTICLE

    def get_signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.publisher)]

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(asdict(self))

    def validate_basic(self) -> None:
        """Raise if the message cannot be valid whatever the chain state."""
        try:
            acc_address_from_bech32(self.publisher)
        except ValueError as err:
            raise InvalidAddressError(f"invalid publisher address ({err})") from err

        title_length = len(self.title.encode())
        if title_length < MIN_TITLE_LENGTH or title_length > MAX_TITLE_LENGTH:
            raise InvalidRequestError("invalid title: expecting between 10 and 140 characters")

        try:
            self.parse_url(self.url)
        except ValueError as err:
            raise InvalidRequestError(f"invalid url provided ({err})") from err
        if len(self.url.encode()) > MAX_URL_LENGTH:
            raise InvalidRequestError("invalid url: provided url exceeds 2048 characters")

        if not self.picture:
            return
        try:
            self.parse_url(self.picture)
        except ValueError as err:
            raise InvalidRequestError(f"invalid picture url provided ({err})") from err
        if len(self.picture.encode()) > MAX_URL_LENGTH:
            raise InvalidRequestError("invalid picture url: provided url exceeds 2048 chars")

    def parse_url(self, uri: str) -> ParsedUrl:
        """Parse an absolute https URL, raising ValueError otherwise."""
        return _parse_request_uri(uri)


@dataclass
class MsgPayPublisherRespect:
    """Pay an amount of respect to a publisher."""

    creator: str = ""
    address: str = ""
    amount: str = ""

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_PAY_PUBLISHER_RESPECT

    def get_signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.creator)]

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(asdict(self))

    def validate_basic(self) -> None:
        """Raise if the message cannot be valid whatever the chain state."""
        try:
            acc_address_from_bech32(self.creator)
        except ValueError as err:
            raise InvalidAddressError(f"invalid creator address ({err})") from err
        try:
            acc_address_from_bech32(self.address)
        except ValueError as err:
            raise InvalidAddressError(f"invalid publisher address ({err})") from err
        try:
            amount = parse_coin_normalized(self.amount)
        except ValueError as err:
            raise InvalidCoinsError(f"invalid amount ({err})") from err
        if not amount.is_positive():
            raise InvalidCoinsError("invalid amount: amount should be positive")


def validate_abstract(title: str, description: str) -> None:
    """Check the title and description every proposal carries."""
    if not title.strip():
        raise InvalidProposalContentError("proposal title cannot be blank")
    if len(title) > MAX_PROPOSAL_TITLE_LENGTH:
        raise InvalidProposalContentError(
            f"proposal title is longer than max length of {MAX_PROPOSAL_TITLE_LENGTH}"
        )
    if not description.strip():
        raise InvalidProposalContentError("proposal description cannot be blank")
    if len(description) > MAX_PROPOSAL_DESCRIPTION_LENGTH:
        raise InvalidProposalContentError(
            f"proposal description is longer than max length of {MAX_PROPOSAL_DESCRIPTION_LENGTH}"
        )


@dataclass
class AcceptedDomainProposal:
    """Propose adding, enabling or disabling an accepted domain."""

    title: str = ""
    description: str = ""
    domain: str = ""
    active: bool = True

    def proposal_route(self) -> str:
        return ROUTER_KEY

    def proposal_type(self) -> str:
        return PROPOSAL_TYPE_ACCEPTED_DOMAIN

    def validate_basic(self) -> None:
        validate_abstract(self.title, self.description)
        if not _DOMAIN_RE.fullmatch(self.domain):
            raise InvalidProposalContentError("proposal domain is invalid")


@dataclass
class PublisherProposal:
    """Propose adding, enabling or disabling a publisher."""

    title: str = ""
    description: str = ""
    name: str = ""
    address: str = ""
    active: bool = True

    def proposal_route(self) -> str:
        return ROUTER_KEY

    def proposal_type(self) -> str:
        return PROPOSAL_TYPE_PUBLISHER

    def validate_basic(self) -> None:
        validate_abstract(self.title, self.description)
        try:
            acc_address_from_bech32(self.address)
        except ValueError as err:
            raise InvalidProposalContentError("proposal publisher address is invalid") from err


AMINO_NAMES = {
    AcceptedDomainProposal: "cointrunk/AcceptedDomainProposal",
    PublisherProposal: "cointrunk/PublisherProposal",
    MsgAddArticle: "cointrunk/AddArticle",
    MsgPayPublisherRespect: "cointrunk/PayPublisherRespect",
}