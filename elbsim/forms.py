"""Request field access.

The query API flattens every repeated value into positional keys:

    Listeners.member.1.Protocol=HTTP
    Listeners.member.2.Protocol=TCP
    AvailabilityZones.member.1=us-east-1a

A list ends at the first index whose probe key is missing or empty.
"""
from __future__ import annotations

from typing import Iterable, Iterator, Mapping


class Form(Mapping[str, str]):
    """Immutable snapshot of the request fields. Missing keys read as ``""``."""

    def __init__(self, fields: Mapping[str, str] | Iterable[tuple[str, str]] = ()) -> None:
        items = fields.items() if isinstance(fields, Mapping) else fields
        data: dict[str, str] = {}
        for key, value in items:
            # First value wins for repeated keys.
            data.setdefault(key, value)
        self._data = data

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Form({self._data!r})"

    def value(self, key: str) -> str:
        return self._data.get(key, "")

    def has(self, key: str) -> bool:
        return self.value(key) != ""

    def scoped(self, prefix: str) -> "Form":
        """Return the fields under ``prefix`` with the prefix stripped."""
        return Form((k[len(prefix):], v) for k, v in self._data.items() if k.startswith(prefix))


def member_key(list_name: str, index: int, key: str | None = None) -> str:
    base = f"{list_name}.member.{index}"
    return f"{base}.{key}" if key else base


def member_values(form: Form, list_name: str, key: str | None = None) -> Iterator[tuple[int, str]]:
    """Yield ``(index, value)`` for ``<list_name>.member.<index>[.<key>]``."""
    index = 1
    value = form.value(member_key(list_name, index, key))
    while value != "":
        yield index, value
        index += 1
        value = form.value(member_key(list_name, index, key))


def member_fields(form: Form, list_name: str, probe: str) -> Iterator[tuple[int, Form]]:
    """Yield ``(index, fields)`` for structured members, probing ``probe``.

    ``fields`` is the member's sub-fields with the ``<list_name>.member.<index>.``
    prefix removed, so ``fields.value("Protocol")`` reads the member's protocol.
    """
    for index, _ in member_values(form, list_name, probe):
        yield index, form.scoped(member_key(list_name, index) + ".")
