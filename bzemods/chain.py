"""Accounts, coins and the bank and distribution services the modules rely on."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .errors import InsufficientFundsError, InvalidCoinsError

ACCOUNT_ADDRESS_PREFIX = "bze"
DISTRIBUTION_MODULE_NAME = "distribution"
MAX_ADDRESS_LENGTH = 255
MAX_DECIMAL_PRECISION = 18

_BECH32_MAX_LENGTH = 1023
_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)

_DENOM_PATTERN = r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}"
_DENOM_RE = re.compile(_DENOM_PATTERN)
_DEC_COIN_RE = re.compile(
    rf"([0-9]+(?:\.[0-9]+)?|\.[0-9]+)[ \t\n\r\f\v]*({_DENOM_PATTERN})"
)


def _polymod(values: Iterable[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 25
        checksum = ((checksum & 0x1FFFFFF) << 5) ^ value
        for bit, generator in enumerate(_GENERATORS):
            if (top >> bit) & 1:
                checksum ^= generator
    return checksum


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, values: list[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + values + [0] * 6) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def _convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    max_value = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise ValueError("invalid data range")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & max_value)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or (acc << (to_bits - bits)) & max_value:
        raise ValueError("invalid padding in bech32 data")
    return out


def bech32_encode(hrp: str, data: bytes) -> str:
    """Encode raw bytes as a bech32 string with the given human readable part."""
    if not hrp:
        raise ValueError("empty human readable part")
    hrp = hrp.lower()
    values = _convert_bits(data, 8, 5, True)
    checksum = _create_checksum(hrp, values)
    return hrp + "1" + "".join(_CHARSET[v] for v in values + checksum)


def bech32_decode(address: str) -> tuple[str, bytes]:
    """Split a bech32 string into its human readable part and raw bytes."""
    if len(address) > _BECH32_MAX_LENGTH:
        raise ValueError(f"bech32 string too long ({len(address)})")
    if any(ord(c) < 33 or ord(c) > 126 for c in address):
        raise ValueError("invalid character in bech32 string")
    if address.lower() != address and address.upper() != address:
        raise ValueError("bech32 string has mixed case")
    address = address.lower()
    separator = address.rfind("1")
    if separator < 1 or separator + 7 > len(address):
        raise ValueError("invalid separator position in bech32 string")
    hrp, payload = address[:separator], address[separator + 1:]
    invalid = [c for c in payload if c not in _CHARSET]
    if invalid:
        raise ValueError(f"invalid character not part of charset: {invalid[0]!r}")
    values = [_CHARSET.index(c) for c in payload]
    if _polymod(_hrp_expand(hrp) + values) != 1:
        raise ValueError("invalid bech32 checksum")
    return hrp, bytes(_convert_bits(values[:-6], 5, 8, False))


def acc_address_from_bech32(address: str) -> bytes:
    """Decode an account address, checking its prefix and length."""
    if not address.strip():
        raise ValueError("empty address string is not allowed")
    hrp, raw = bech32_decode(address)
    if hrp != ACCOUNT_ADDRESS_PREFIX:
        raise ValueError(f"invalid Bech32 prefix; expected {ACCOUNT_ADDRESS_PREFIX}, got {hrp}")
    if not raw:
        raise ValueError("addresses cannot be empty")
    if len(raw) > MAX_ADDRESS_LENGTH:
        raise ValueError(f"address max length is {MAX_ADDRESS_LENGTH}, got {len(raw)}")
    return raw


def address_to_bech32(raw: bytes) -> str:
    """Render raw account bytes as an account address."""
    return bech32_encode(ACCOUNT_ADDRESS_PREFIX, bytes(raw))


def module_address(name: str) -> bytes:
    """The account address owned by a module: the first 20 bytes of SHA-256 of its name."""
    return hashlib.sha256(name.encode()).digest()[:20]


def validate_denom(denom: str) -> str:
    """Return the denomination if it is well formed, else raise ValueError."""
    if not _DENOM_RE.fullmatch(denom):
        raise ValueError(f"invalid denom: {denom}")
    return denom


@dataclass(frozen=True)
class Coin:
    """An amount of a single denomination."""

    denom: str
    amount: int

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_valid(self) -> bool:
        if self.amount < 0:
            return False
        try:
            validate_denom(self.denom)
        except ValueError:
            return False
        return True


def _parse_dec_coin(text: str) -> tuple[str, Decimal]:
    text = text.strip()
    match = _DEC_COIN_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid decimal coin expression: {text}")
    amount_text, denom = match.groups()
    _, _, fraction = amount_text.partition(".")
    if len(fraction) > MAX_DECIMAL_PRECISION:
        raise ValueError(f"invalid precision; max: {MAX_DECIMAL_PRECISION}, got: {len(fraction)}")
    validate_denom(denom)
    return denom, Decimal(amount_text)


def parse_coin_normalized(text: str) -> Coin:
    """Parse a coin such as '10ubze' or '1.5ubze', dropping any fractional part."""
    denom, amount = _parse_dec_coin(text)
    return Coin(denom, int(amount))


def parse_coins_normalized(text: str) -> tuple[Coin, ...]:
    """Parse comma separated coins; zero amounts are dropped and the rest sorted by denom."""
    text = text.strip()
    if not text:
        return ()
    parsed = [_parse_dec_coin(part) for part in text.split(",")]
    kept = sorted((entry for entry in parsed if entry[1] != 0), key=lambda entry: entry[0])
    for (previous, _), (current, _) in zip(kept, kept[1:]):
        if previous == current:
            raise ValueError(f"duplicate denomination {current}")
    return tuple(Coin(denom, int(amount)) for denom, amount in kept)


def _checked_coins(coins: Iterable[Coin]) -> tuple[Coin, ...]:
    result = []
    seen = set()
    for coin in coins:
        if not coin.is_valid():
            raise InvalidCoinsError(str(coin))
        if coin.denom in seen:
            raise InvalidCoinsError(f"duplicate denomination {coin.denom}")
        seen.add(coin.denom)
        if coin.is_positive():
            result.append(coin)
    return tuple(sorted(result, key=lambda coin: coin.denom))


class Bank:
    """In-memory account balances."""

    def __init__(self) -> None:
        self._balances: dict[bytes, dict[str, int]] = {}

    def mint(self, address: bytes, coins: Iterable[Coin]) -> None:
        """Credit coins to an account out of nothing."""
        account = self._balances.setdefault(bytes(address), {})
        for coin in _checked_coins(coins):
            account[coin.denom] = account.get(coin.denom, 0) + coin.amount

    def balance(self, address: bytes, denom: str) -> int:
        return self._balances.get(bytes(address), {}).get(denom, 0)

    def send_coins(self, ctx: Any, from_addr: bytes, to_addr: bytes, coins: Iterable[Coin]) -> None:
        """Move coins between accounts; nothing moves if any coin is short."""
        checked = _checked_coins(coins)
        for coin in checked:
            available = self.balance(from_addr, coin.denom)
            if available < coin.amount:
                raise InsufficientFundsError(f"{available}{coin.denom} is smaller than {coin}")
        sender = self._balances.setdefault(bytes(from_addr), {})
        receiver = self._balances.setdefault(bytes(to_addr), {})
        for coin in checked:
            sender[coin.denom] -= coin.amount
            receiver[coin.denom] = receiver.get(coin.denom, 0) + coin.amount


class Distribution:
    """The community pool, funded through the bank."""

    def __init__(self, bank: Bank) -> None:
        self.bank = bank
        self._pool: dict[str, int] = {}

    @property
    def community_pool(self) -> dict[str, int]:
        return dict(self._pool)

    def fund_community_pool(self, ctx: Any, amount: Iterable[Coin], sender: bytes) -> None:
        coins = tuple(amount)
        self.bank.send_coins(ctx, sender, module_address(DISTRIBUTION_MODULE_NAME), coins)
        for coin in coins:
            if coin.amount:
                self._pool[coin.denom] = self._pool.get(coin.denom, 0) + coin.amount