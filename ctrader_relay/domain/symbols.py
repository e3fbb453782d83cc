"""Symbol name and lot-size tables assembled during a sync.

The remote API is not consistent about field spellings across endpoints and
versions, so every lookup accepts a small set of aliases.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

SYMBOL_ID_FIELDS = ("symbolId", "id", "symbol_id")
DEAL_SYMBOL_ID_FIELDS = ("symbolId", "symbol_id")
SYMBOL_NAME_FIELDS = ("symbolName", "name", "symbol_name")
LOT_SIZE_FIELDS = ("lotSize", "lot_size")


def _first_present(entry: Mapping[str, Any], fields: Iterable[str]) -> Any:
    for field in fields:
        value = entry.get(field)
        if value is not None and value != "":
            return value
    return None


def parse_symbol_id(value: Any) -> int | None:
    """Coerce a symbol id from the wire, or None if it is unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def extract_symbol_id(entry: Mapping[str, Any]) -> int | None:
    """Read the symbol id of a symbol list or symbol detail entry."""
    return parse_symbol_id(_first_present(entry, SYMBOL_ID_FIELDS))


def _parse_lot_size(value: Any) -> int | float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number <= 0:  # NaN or non-positive
        return None
    return int(number) if number.is_integer() else number


class SymbolCatalog:
    """Symbol Table and Lot-Size Table for one sync.

    Names come from the symbol list first; symbol details only fill gaps.
    Lot sizes come from symbol details only. A name, once known, is never
    replaced.
    """

    def __init__(self) -> None:
        self._names: dict[int, str] = {}
        self._lot_sizes: dict[int, int | float] = {}

    @property
    def names(self) -> dict[int, str]:
        return dict(self._names)

    @property
    def lot_sizes(self) -> dict[int, int | float]:
        return dict(self._lot_sizes)

    def has_name(self, symbol_id: int) -> bool:
        return symbol_id in self._names

    def _record_name(self, entry: Mapping[str, Any], symbol_id: int) -> bool:
        name = _first_present(entry, SYMBOL_NAME_FIELDS)
        if name is None or symbol_id in self._names:
            return False
        self._names[symbol_id] = str(name)
        return True

    def add_listed_symbols(self, entries: Iterable[Any]) -> int:
        """Add entries from a symbol list response.

        Returns:
            Number of names added
        """
        added = 0
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            symbol_id = extract_symbol_id(entry)
            if symbol_id is None:
                continue
            if self._record_name(entry, symbol_id):
                added += 1
        return added

    def add_symbol_details(self, entries: Iterable[Any]) -> int:
        """Add entries from a symbol detail response.

        Records the lot size of each entry and backfills names that the
        symbol list did not provide.

        Returns:
            Number of lot sizes recorded
        """
        recorded = 0
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            symbol_id = extract_symbol_id(entry)
            if symbol_id is None:
                continue
            lot_size = _parse_lot_size(_first_present(entry, LOT_SIZE_FIELDS))
            if lot_size is not None and symbol_id not in self._lot_sizes:
                self._lot_sizes[symbol_id] = lot_size
                recorded += 1
            if self._record_name(entry, symbol_id):
                logger.debug(f"Backfilled name for symbol {symbol_id} from symbol details")
        return recorded

    def __len__(self) -> int:
        return len(self._names)


def distinct_deal_symbol_ids(deals: Iterable[Mapping[str, Any]]) -> list[int]:
    """Distinct symbol ids referenced by deals, in first-seen order."""
    seen: dict[int, None] = {}
    for deal in deals:
        symbol_id = parse_symbol_id(_first_present(deal, DEAL_SYMBOL_ID_FIELDS))
        if symbol_id is not None:
            seen.setdefault(symbol_id, None)
    return list(seen)
