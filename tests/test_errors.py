import pytest

from bzemods.errors import (
    InsufficientFundsError,
    InvalidAddressError,
    InvalidCoinsError,
    InvalidProposalContentError,
    InvalidRequestError,
    QueryError,
    SdkError,
    StatusCode,
    UnknownRequestError,
)


def test_wrapped_message_is_followed_by_description():
    err = InvalidRequestError("Scavenge already exists")
    assert str(err) == "Scavenge already exists: invalid request"
    assert err.message == "Scavenge already exists"


def test_bare_error_shows_description_only():
    assert str(InvalidProposalContentError()) == "invalid proposal content"


def test_proposal_error_lives_in_module_codespace():
    err = InvalidProposalContentError("proposal domain is invalid")
    assert (err.codespace, err.code) == ("cointrunk", 5)
    assert str(err).endswith(": invalid proposal content")


@pytest.mark.parametrize(
    "cls",
    [
        InvalidAddressError,
        InvalidRequestError,
        InvalidCoinsError,
        UnknownRequestError,
        InsufficientFundsError,
        InvalidProposalContentError,
    ],
)
def test_every_error_is_caught_as_sdk_error(cls):
    with pytest.raises(SdkError) as info:
        raise cls("boom")
    assert info.value.message == "boom"
    assert str(info.value) == f"boom: {cls.description}"


def test_sdk_codes_are_distinct():
    errors = [
        InvalidAddressError("a"),
        InvalidRequestError("b"),
        InvalidCoinsError("c"),
        UnknownRequestError("d"),
        InsufficientFundsError("e"),
    ]
    codes = {(err.codespace, err.code) for err in errors}
    assert len(codes) == len(errors)


def test_query_errors_compare_by_code_and_message():
    first = QueryError(StatusCode.INVALID_ARGUMENT, "not found")
    assert first == QueryError(StatusCode.INVALID_ARGUMENT, "not found")
    assert not first == QueryError(StatusCode.INVALID_ARGUMENT, "invalid request")
    assert not first == QueryError(StatusCode.INTERNAL, "not found")
    assert hash(first) == hash(QueryError(StatusCode.INVALID_ARGUMENT, "not found"))


def test_query_error_text():
    err = QueryError(StatusCode.INVALID_ARGUMENT, "invalid request")
    assert str(err) == "rpc error: code = InvalidArgument desc = invalid request"