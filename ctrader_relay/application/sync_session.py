"""Session protocol sequencer.

Drives the ordered exchange that turns one sync request into a complete
trade history: application auth, account auth, symbol list, paginated deal
list and symbol details. Authentication and deal pages are prerequisites of
any meaningful result and fail the sync; the symbol steps only enrich it
and degrade to partial tables.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from ..domain.enums import PayloadType
from ..domain.exceptions import ProtocolException
from ..domain.models import SessionLimits, SyncRequest, SyncResult
from ..domain.symbols import SymbolCatalog, distinct_deal_symbol_ids
from ..ports.transport import TransportFactory
from .correlator import RequestCorrelator

logger = logging.getLogger(__name__)


def _chunked(items: Sequence[int], size: int) -> Iterator[list[int]]:
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def _max_execution_timestamp(deals: Sequence[dict[str, Any]]) -> int | None:
    timestamps = []
    for deal in deals:
        try:
            timestamps.append(int(deal["executionTimestamp"]))
        except (KeyError, TypeError, ValueError):
            continue
    return max(timestamps) if timestamps else None


class SessionSequencer:
    """Runs one sync over a fresh connection."""

    def __init__(
        self,
        transport_factory: TransportFactory,
        limits: SessionLimits | None = None,
        include_lot_sizes: bool = True,
    ):
        """Initialize the sequencer.

        Args:
            transport_factory: Builds an unconnected transport for a host
            limits: Timeouts and bounds of the exchange
            include_lot_sizes: Whether to fetch symbol details for lot sizes
        """
        self._transport_factory = transport_factory
        self._limits = limits or SessionLimits()
        self._include_lot_sizes = include_lot_sizes

    @property
    def limits(self) -> SessionLimits:
        return self._limits

    async def run(self, request: SyncRequest) -> SyncResult:
        """Execute the full exchange for ``request``.

        The connection is closed before this returns or raises.

        Raises:
            ProtocolException: If connecting, authenticating or fetching a deal page fails
        """
        transport = self._transport_factory(request.host)
        try:
            await transport.connect()
            async with RequestCorrelator(transport) as correlator:
                return await self._exchange(correlator, request)
        finally:
            await transport.close()

    async def _exchange(self, correlator: RequestCorrelator, request: SyncRequest) -> SyncResult:
        account_id = request.ctid_account_id

        await self._authenticate_application(correlator, request)
        await self._authenticate_account(correlator, request)

        catalog = SymbolCatalog()
        await self._fetch_symbol_list(correlator, account_id, catalog)

        deals, pages = await self._fetch_deals(correlator, request)

        lot_sizes = None
        if self._include_lot_sizes:
            await self._fetch_symbol_details(correlator, account_id, deals, catalog)
            lot_sizes = catalog.lot_sizes

        logger.info(f"Done: {len(deals)} deals in {pages} pages")
        return SyncResult(
            deals=deals,
            symbols=catalog.names,
            lot_sizes=lot_sizes,
            pages=pages,
            total=len(deals),
        )

    async def _authenticate_application(
        self, correlator: RequestCorrelator, request: SyncRequest
    ) -> None:
        logger.info(f"App auth for ctid={request.ctid_account_id}")
        await correlator.request(
            PayloadType.APPLICATION_AUTH_REQ,
            {"clientId": request.client_id, "clientSecret": request.client_secret},
            PayloadType.APPLICATION_AUTH_RES,
            timeout=self._limits.auth_timeout,
        )

    async def _authenticate_account(
        self, correlator: RequestCorrelator, request: SyncRequest
    ) -> None:
        logger.info("Account auth")
        await correlator.request(
            PayloadType.ACCOUNT_AUTH_REQ,
            {
                "ctidTraderAccountId": request.ctid_account_id,
                "accessToken": request.access_token,
            },
            PayloadType.ACCOUNT_AUTH_RES,
            timeout=self._limits.auth_timeout,
        )

    async def _fetch_symbol_list(
        self, correlator: RequestCorrelator, account_id: int, catalog: SymbolCatalog
    ) -> None:
        logger.info("Fetching symbols")
        try:
            response = await correlator.request(
                PayloadType.SYMBOLS_LIST_REQ,
                {"ctidTraderAccountId": account_id, "includeArchivedSymbols": False},
                PayloadType.SYMBOLS_LIST_RES,
                timeout=self._limits.symbol_list_timeout,
            )
        except ProtocolException as e:
            logger.warning(f"Symbol list unavailable, continuing without names: {e.message}")
            return

        entries = response.payload.get("symbol") or []
        catalog.add_listed_symbols(entries)
        logger.info(f"Got {len(catalog)} symbols")

    async def _fetch_deals(
        self, correlator: RequestCorrelator, request: SyncRequest
    ) -> tuple[list[dict[str, Any]], int]:
        """Page through the deal list.

        Pages are requested with a cursor that advances past the newest
        execution timestamp seen. A short or empty page ends the history.
        """
        per_page = self._limits.deals_per_page
        cursor = request.from_timestamp
        all_deals: list[dict[str, Any]] = []
        pages = 0

        while pages < self._limits.max_pages:
            response = await correlator.request(
                PayloadType.DEAL_LIST_REQ,
                {
                    "ctidTraderAccountId": request.ctid_account_id,
                    "fromTimestamp": cursor,
                    "toTimestamp": request.to_timestamp,
                    "maxRows": per_page,
                },
                PayloadType.DEAL_LIST_RES,
                timeout=self._limits.deal_page_timeout,
            )
            deals = [d for d in response.payload.get("deal") or [] if isinstance(d, dict)]
            logger.info(f"Page {pages + 1}: {len(deals)} deals")
            if not deals:
                break

            all_deals.extend(deals)
            pages += 1
            if len(deals) < per_page:
                break

            newest = _max_execution_timestamp(deals)
            if newest is None:
                logger.warning("Full page without executionTimestamp, cannot advance cursor")
                break
            cursor = newest + 1
            if cursor >= request.to_timestamp:
                break
        else:
            logger.warning(f"Stopped after {pages} pages, history may be incomplete")

        return all_deals, pages

    async def _fetch_symbol_details(
        self,
        correlator: RequestCorrelator,
        account_id: int,
        deals: Sequence[dict[str, Any]],
        catalog: SymbolCatalog,
    ) -> None:
        symbol_ids = distinct_deal_symbol_ids(deals)
        if not symbol_ids:
            return

        logger.info(f"Fetching details for {len(symbol_ids)} traded symbols")
        for chunk in _chunked(symbol_ids, self._limits.symbol_detail_chunk_size):
            try:
                response = await correlator.request(
                    PayloadType.SYMBOL_BY_ID_REQ,
                    {"ctidTraderAccountId": account_id, "symbolId": chunk},
                    PayloadType.SYMBOL_BY_ID_RES,
                    timeout=self._limits.symbol_detail_timeout,
                )
            except ProtocolException as e:
                logger.warning(f"Symbol details for {len(chunk)} symbols unavailable: {e.message}")
                continue
            catalog.add_symbol_details(response.payload.get("symbol") or [])
