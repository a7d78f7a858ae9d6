"""Batch use cases: create payment links and check their status."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol, Sequence

from .dtos import (
    BatchSummary,
    InputRecord,
    PaymentInfo,
    PaymentLinkRecord,
    PaymentRequestStatus,
    PaymentStatusResult,
)
from ..domain.errors import MalformedLinkError, RemoteError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_DELAY = 1.0


class PaymentLinkGateway(Protocol):
    """What the batch service needs from a payment-links API client."""

    async def create_payment_link(
        self, amount: str, description: str, name: str = ""
    ) -> PaymentInfo: ...

    async def get_payment_status(self, payment_link: str) -> PaymentRequestStatus: ...


class PaymentLinkBatchService:
    """Runs records through the payment-links API one at a time.

    A failing record is logged and skipped; it never aborts the batch.
    """

    def __init__(
        self,
        client: PaymentLinkGateway,
        delay: float = DEFAULT_REQUEST_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self.client = client
        self.delay = delay
        self._sleep = sleep

    async def create_payment_links(
        self, records: Sequence[InputRecord]
    ) -> list[PaymentInfo]:
        payment_infos: list[PaymentInfo] = []
        for index, record in enumerate(records):
            # No pause before the first request or after the last one
            if index > 0 and self.delay:
                await self._sleep(self.delay)
            try:
                info = await self.client.create_payment_link(
                    record.amount, record.description, name=record.name
                )
            except RemoteError as e:
                logger.error("Payment request for %s failed: %s", record.name, e)
                continue

            logger.info(
                "Payment request for %s was successful. Payment link: %s",
                record.name,
                info.payment_link,
            )
            payment_infos.append(info)

        self._log_summary(
            "create",
            BatchSummary(total=len(records), succeeded=len(payment_infos)),
        )
        return payment_infos

    async def check_payment_statuses(
        self, records: Sequence[PaymentLinkRecord]
    ) -> list[PaymentStatusResult]:
        results: list[PaymentStatusResult] = []
        for record in records:
            try:
                status = await self.client.get_payment_status(record.payment_link)
            except (RemoteError, MalformedLinkError) as e:
                logger.error("Status check for %s failed: %s", record.name, e)
                continue

            logger.info(
                "Payment Request for %s from %s (id: %s) was paid at: %s",
                record.name,
                record.amount,
                status.id,
                status.paid_at or "N/A",
            )
            results.append(
                PaymentStatusResult(
                    name=record.name,
                    amount=record.amount,
                    payment_link=record.payment_link,
                    status=status,
                )
            )

        self._log_summary(
            "check", BatchSummary(total=len(records), succeeded=len(results))
        )
        return results

    @staticmethod
    def _log_summary(kind: str, summary: BatchSummary) -> None:
        logger.info(
            "Finished %s batch: %d record(s), %d succeeded, %d failed",
            kind,
            summary.total,
            summary.succeeded,
            summary.failed,
        )
