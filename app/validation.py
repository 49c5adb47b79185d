"""Validation helpers for request payloads."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from app.errors import CurrenciesNotFoundError
from app.models.dataset import EUR, Dataset


@dataclass(frozen=True)
class Conversion:
    """Validated base currency plus the optional symbols to report."""

    base: str = EUR
    symbols: tuple[str, ...] = ()


def validate_conversion(
    dataset: Dataset,
    base: str | None = None,
    symbols: Iterable[str] | None = None,
) -> Conversion:
    """Ensure the requested currencies exist in the dataset catalog.

    Raises:
        CurrenciesNotFoundError: If the base or any symbol is not in the catalog.
    """

    target_base = base or EUR
    if not dataset.has_currency(target_base):
        raise CurrenciesNotFoundError([target_base])

    requested = tuple(dict.fromkeys(symbols or ()))
    missing = [code for code in requested if not dataset.has_currency(code)]
    if missing:
        raise CurrenciesNotFoundError(missing)

    return Conversion(base=target_base, symbols=requested)
