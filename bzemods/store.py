"""Key-value stores, pagination, events and the execution context."""

from __future__ import annotations

import dataclasses
import inspect
import json
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Protocol

DEFAULT_PAGE_LIMIT = 100


def key_prefix(p: str) -> bytes:
    """The bytes of a store key prefix."""
    return p.encode()


def _check_key(key: bytes) -> bytes:
    if not key:
        raise ValueError("key is empty")
    return bytes(key)


def _check_value(value: bytes) -> bytes:
    if value is None:
        raise ValueError("value is nil")
    return bytes(value)


class _Store(Protocol):
    def get(self, key: bytes) -> bytes | None: ...

    def set(self, key: bytes, value: bytes) -> None: ...

    def delete(self, key: bytes) -> None: ...

    def items(self) -> Iterator[tuple[bytes, bytes]]: ...


class KVStore:
    """An in-memory store whose entries iterate in ascending key order."""

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: bytes) -> bytes | None:
        return self._data.get(_check_key(key))

    def set(self, key: bytes, value: bytes) -> None:
        self._data[_check_key(key)] = _check_value(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(_check_key(key), None)

    def items(self) -> Iterator[tuple[bytes, bytes]]:
        yield from sorted(self._data.items())


class PrefixStore:
    """A view of a parent store restricted to keys under one prefix."""

    def __init__(self, parent: _Store, prefix: bytes) -> None:
        self.parent = parent
        self.prefix = bytes(prefix)

    def get(self, key: bytes) -> bytes | None:
        return self.parent.get(self.prefix + _check_key(key))

    def set(self, key: bytes, value: bytes) -> None:
        self.parent.set(self.prefix + _check_key(key), _check_value(value))

    def delete(self, key: bytes) -> None:
        self.parent.delete(self.prefix + _check_key(key))

    def items(self) -> Iterator[tuple[bytes, bytes]]:
        inside = False
        for key, value in self.parent.items():
            if key.startswith(self.prefix):
                inside = True
                yield key[len(self.prefix):], value
            elif inside:
                break


@dataclass
class PageRequest:
    """Which page of a listing to return."""

    key: bytes | None = None
    offset: int = 0
    limit: int = 0
    count_total: bool = False
    reverse: bool = False


@dataclass
class PageResponse:
    """Where the next page starts, and the total when it was counted."""

    next_key: bytes | None = None
    total: int = 0


@dataclass
class ListRequest:
    """A request for a page of records."""

    pagination: PageRequest | None = None


@dataclass
class IndexRequest:
    """A request for one record by its index."""

    index: str = ""


@dataclass
class PagedResult:
    """A page of entries along with its pagination details."""

    items: list
    pagination: PageResponse


def paginate(store: _Store, page_request: PageRequest | None = None) -> PagedResult:
    """Return one page of (key, value) entries of a store."""
    request = page_request or PageRequest()
    key = request.key
    offset = request.offset
    limit = request.limit
    count_total = request.count_total

    if offset > 0 and key is not None:
        raise ValueError("invalid request, either offset or key is expected, got both")
    if limit == 0:
        limit = DEFAULT_PAGE_LIMIT
        count_total = True

    entries = list(store.items())

    if key:
        if request.reverse:
            first_at_or_after = next(
                (i for i, (k, _) in enumerate(entries) if k >= key), len(entries)
            )
            selected = entries[: first_at_or_after + 1]
            selected.reverse()
        else:
            selected = [entry for entry in entries if entry[0] >= key]
        next_key = selected[limit][0] if len(selected) > limit else None
        return PagedResult(selected[:limit], PageResponse(next_key=next_key))

    if request.reverse:
        entries.reverse()
    end = offset + limit
    next_key = entries[end][0] if len(entries) > end else None
    total = len(entries) if count_total else 0
    return PagedResult(entries[offset:end], PageResponse(next_key=next_key, total=total))


def _to_plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    return value


def encode_record(record: Any) -> bytes:
    """Serialise a dataclass record to bytes for storage."""
    return json.dumps(_to_plain(record), sort_keys=True, separators=(",", ":")).encode()


def _field_class(cls: type, annotation: Any) -> Any:
    """The class a field is annotated with, when the annotation names one plainly."""
    if isinstance(annotation, type):
        return annotation
    if isinstance(annotation, str):
        module = inspect.getmodule(cls)
        if module is not None:
            return getattr(module, annotation.strip(), None)
    return None


def _from_plain(cls: type, payload: dict) -> Any:
    values = {}
    for f in dataclasses.fields(cls):
        if f.name not in payload:
            continue
        value = payload[f.name]
        hint = _field_class(cls, f.type)
        if isinstance(hint, type) and dataclasses.is_dataclass(hint) and isinstance(value, dict):
            value = _from_plain(hint, value)
        values[f.name] = value
    return cls(**values)


def decode_record(cls: type, data: bytes) -> Any:
    """Rebuild a dataclass record from bytes written by encode_record."""
    payload = json.loads(data)
    if not isinstance(payload, dict):
        raise ValueError(f"cannot decode {cls.__name__} from {payload!r}")
    return _from_plain(cls, payload)


@dataclass
class Event:
    """An untyped event: a type name and its attributes."""

    type: str
    attributes: dict[str, str] = field(default_factory=dict)


class EventManager:
    """Collects the events emitted while handling a message."""

    def __init__(self) -> None:
        self._events: list[Any] = []

    @property
    def events(self) -> tuple:
        return tuple(self._events)

    def emit(self, event: Any) -> None:
        self._events.append(event)

    def of_type(self, cls: type) -> list:
        return [event for event in self._events if isinstance(event, cls)]


def _epoch() -> datetime:
    return datetime.fromtimestamp(0, timezone.utc)


@dataclass
class Context:
    """The block being executed: its time, height, stores and event sink."""

    block_time: datetime = field(default_factory=_epoch)
    block_height: int = 0
    event_manager: EventManager = field(default_factory=EventManager)
    stores: dict[str, KVStore] = field(default_factory=dict)

    def kv_store(self, store_key: str) -> KVStore:
        return self.stores.setdefault(store_key, KVStore())

    def with_event_manager(self, manager: EventManager) -> Context:
        return replace(self, event_manager=manager)