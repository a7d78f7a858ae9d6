from __future__ import annotations

import logging
import re
from typing import Optional, Type
from types import TracebackType

import httpx
from pydantic import ValidationError

from ...application.dtos import (
    AmountDTO,
    PaymentInfo,
    PaymentLinkResponseDTO,
    PaymentRequestDTO,
    PaymentRequestStatus,
)
from ...domain.errors import MalformedLinkError, RemoteError
from ...middleware.timing import log_timing
from ..http.http_client import AsyncHttpClient

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.mollie.com/v2"
DEFAULT_CURRENCY = "EUR"
DEFAULT_REDIRECT_URL = "https://localhost"

PAYMENT_LINK_RE = re.compile(r"https://paymentlink\.mollie\.com/payment/([\w-]+)/")


def extract_payment_token(payment_link: str) -> str:
    """Return the token part of a hosted payment link.

    Raises:
        MalformedLinkError: If the link does not match the hosted link format.
    """
    match = PAYMENT_LINK_RE.search(payment_link)
    if match is None:
        raise MalformedLinkError(payment_link)
    return match.group(1)


class PaymentLinkClient:
    """Asynchronous client for the Mollie payment-links API.

    One underlying HTTP client is kept for the lifetime of this object and
    reused for every call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        currency: str = DEFAULT_CURRENCY,
        redirect_url: str = DEFAULT_REDIRECT_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._currency = currency
        self._redirect_url = redirect_url
        self._http = AsyncHttpClient(
            base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    @log_timing("create_payment_link")
    async def create_payment_link(
        self, amount: str, description: str, name: str = ""
    ) -> PaymentInfo:
        dto = PaymentRequestDTO(
            amount=AmountDTO(currency=self._currency, value=amount),
            description=description,
            redirect_url=self._redirect_url,
        )
        resp = await self._http.post(
            "/payment-links",
            json=dto.to_payload(),
            headers={"Content-Type": "application/json"},
        )
        try:
            body = PaymentLinkResponseDTO.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise RemoteError(
                "Payment link response has no _links.paymentLink.href",
                status_code=resp.status_code,
                body=resp.text,
            ) from e

        href = body.links.payment_link.href
        logger.debug("Created payment link %s for %r", href, description)
        return PaymentInfo(name=name, amount=amount, payment_link=href)

    @log_timing("get_payment_status")
    async def get_payment_status(self, payment_link: str) -> PaymentRequestStatus:
        token = extract_payment_token(payment_link)
        resp = await self._http.get(f"/payment-links/pl_{token}")
        try:
            return PaymentRequestStatus.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise RemoteError(
                "Payment link status response is not decodable",
                status_code=resp.status_code,
                body=resp.text,
            ) from e

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "PaymentLinkClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
