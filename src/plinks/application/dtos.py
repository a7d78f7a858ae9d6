"""Data Transfer Objects for the payment-link batch pipeline."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly two decimals, as the API expects."""
    return f"{value:.2f}"


# Input rows
class InputRecord(BaseModel):
    """One row of the creation input file (`name,amount_owed,item_ordered`)."""

    model_config = ConfigDict(frozen=True)

    name: str
    amount_owed: Decimal = Field(allow_inf_nan=False)
    item_ordered: str

    @property
    def amount(self) -> str:
        return format_amount(self.amount_owed)

    @property
    def description(self) -> str:
        return f"{self.name} - {self.item_ordered}"


class PaymentLinkRecord(BaseModel):
    """One row of the check input file (`Payment Link,Name,Amount`)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    payment_link: str = Field(alias="Payment Link")
    name: str = Field(alias="Name")
    amount: str = Field(alias="Amount")


# Outbound API payloads
class AmountDTO(BaseModel):
    currency: str
    value: str


class PaymentRequestDTO(BaseModel):
    """Body of `POST /payment-links`."""

    amount: AmountDTO
    description: str
    redirect_url: str = Field(serialization_alias="redirectUrl")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


# API responses
class PaymentLinkHrefDTO(BaseModel):
    href: str


class PaymentLinkLinksDTO(BaseModel):
    payment_link: PaymentLinkHrefDTO = Field(alias="paymentLink")


class PaymentLinkResponseDTO(BaseModel):
    """The part of the create response we rely on: `_links.paymentLink.href`."""

    links: PaymentLinkLinksDTO = Field(alias="_links")


class PaymentRequestStatus(BaseModel):
    """Status of an existing payment link; `paid_at` is unset while unpaid."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    paid_at: Optional[str] = Field(default=None, alias="paidAt")


# Results
class PaymentInfo(BaseModel):
    """A successfully created payment link, written as one output row."""

    name: str
    amount: str
    payment_link: str


class PaymentStatusResult(BaseModel):
    """A checked row joined with the status the API reported for it."""

    name: str
    amount: str
    payment_link: str
    status: PaymentRequestStatus

    @property
    def is_paid(self) -> bool:
        return self.status.paid_at is not None


class BatchSummary(BaseModel):
    total: int
    succeeded: int

    @property
    def failed(self) -> int:
        return self.total - self.succeeded
