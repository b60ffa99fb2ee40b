from __future__ import annotations

from typing import Iterable

from .errors import validation_error
from .forms import Form


def validate_required(form: Form, required: Iterable[str]) -> None:
    """Fail on the first field of ``required`` that is missing or empty."""
    for field in required:
        if not form.has(field):
            raise validation_error(f"{field} is required.")


def validate_composition(form: Form, composition: Iterable[tuple[str, str]]) -> None:
    """Require exactly one field of each pair.

    Some fields cannot appear in the same request, such as
    ``AvailabilityZones.member.1`` and ``Subnets.member.1``, yet one of them
    must be given:

        validate_composition(form, [("AvailabilityZones.member.1", "Subnets.member.1")])
    """
    for first, second in composition:
        has_first, has_second = form.has(first), form.has(second)
        if has_first and has_second:
            raise validation_error(f"Only one of {first} or {second} may be specified")
        if not has_first and not has_second:
            raise validation_error(f"Either {first} or {second} must be specified")
