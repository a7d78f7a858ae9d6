"""Test doubles for the payment-links API."""

from .fake_payment_links_api import FakePaymentLinksAPI
from .stub_payment_link_client import StubPaymentLinkClient

__all__ = [
    "FakePaymentLinksAPI",
    "StubPaymentLinkClient",
]
