"""Business logic tests for the payment-link batch service."""

from __future__ import annotations

import logging

import pytest

from plinks.application.dtos import InputRecord, PaymentLinkRecord
from plinks.application.use_cases import PaymentLinkBatchService
from plinks.infrastructure.mollie.payment_link_client import PaymentLinkClient
from tests.fixtures import FakePaymentLinksAPI, StubPaymentLinkClient


def make_records() -> list[InputRecord]:
    return [
        InputRecord(name="Alice", amount_owed="12.5", item_ordered="Pizza"),
        InputRecord(name="Bob", amount_owed="3", item_ordered="Coffee"),
        InputRecord(name="Carol", amount_owed="7.1", item_ordered="Bagel"),
    ]


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class TestCreatePaymentLinks:
    @pytest.mark.asyncio
    async def test_every_row_becomes_a_payment_link(
        self, stub_client: StubPaymentLinkClient
    ) -> None:
        service = PaymentLinkBatchService(stub_client, delay=0)

        infos = await service.create_payment_links(make_records())

        assert [(i.name, i.amount) for i in infos] == [
            ("Alice", "12.50"),
            ("Bob", "3.00"),
            ("Carol", "7.10"),
        ]
        assert [c[1]["description"] for c in stub_client.calls] == [
            "Alice - Pizza",
            "Bob - Coffee",
            "Carol - Bagel",
        ]

    @pytest.mark.asyncio
    async def test_failed_row_is_skipped_and_batch_continues(
        self, stub_client: StubPaymentLinkClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        stub_client.fail_for("Bob - Coffee")
        service = PaymentLinkBatchService(stub_client, delay=0)

        with caplog.at_level(logging.INFO):
            infos = await service.create_payment_links(make_records())

        assert [i.name for i in infos] == ["Alice", "Carol"]
        assert len(stub_client.calls) == 3
        assert "Payment request for Bob failed" in caplog.text
        assert "3 record(s), 2 succeeded, 1 failed" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_batch(self, stub_client: StubPaymentLinkClient) -> None:
        sleep = RecordingSleep()
        service = PaymentLinkBatchService(stub_client, delay=1.0, sleep=sleep)

        assert await service.create_payment_links([]) == []
        assert stub_client.calls == []
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_pauses_only_between_consecutive_requests(
        self, stub_client: StubPaymentLinkClient
    ) -> None:
        sleep = RecordingSleep()
        service = PaymentLinkBatchService(stub_client, delay=1.0, sleep=sleep)

        await service.create_payment_links(make_records())

        assert sleep.delays == [1.0, 1.0]

    @pytest.mark.asyncio
    async def test_pauses_after_a_failed_request_too(
        self, stub_client: StubPaymentLinkClient
    ) -> None:
        stub_client.fail_for("Alice - Pizza")
        sleep = RecordingSleep()
        service = PaymentLinkBatchService(stub_client, delay=0.5, sleep=sleep)

        await service.create_payment_links(make_records()[:2])

        assert sleep.delays == [0.5]

    def test_negative_delay_is_rejected(
        self, stub_client: StubPaymentLinkClient
    ) -> None:
        with pytest.raises(ValueError):
            PaymentLinkBatchService(stub_client, delay=-1)


class TestCreatePaymentLinksOverHttp:
    @pytest.mark.asyncio
    async def test_three_successes_give_three_rows_in_order(
        self, fake_api: FakePaymentLinksAPI
    ) -> None:
        client = PaymentLinkClient("key", transport=fake_api.transport())
        async with client:
            infos = await PaymentLinkBatchService(client, delay=0).create_payment_links(
                make_records()
            )

        assert [i.name for i in infos] == ["Alice", "Bob", "Carol"]
        assert all(i.payment_link == "https://x/y" for i in infos)
        assert fake_api.call_count == 3

    @pytest.mark.asyncio
    async def test_one_failure_gives_two_rows(
        self, fake_api: FakePaymentLinksAPI
    ) -> None:
        fake_api.failing_descriptions.add("Bob - Coffee")

        client = PaymentLinkClient("key", transport=fake_api.transport())
        async with client:
            infos = await PaymentLinkBatchService(client, delay=0).create_payment_links(
                make_records()
            )

        assert [i.name for i in infos] == ["Alice", "Carol"]
        assert fake_api.call_count == 3

    @pytest.mark.asyncio
    async def test_consecutive_requests_are_spaced_by_the_delay(
        self, fake_api: FakePaymentLinksAPI
    ) -> None:
        delay = 0.2

        client = PaymentLinkClient("key", transport=fake_api.transport())
        async with client:
            await PaymentLinkBatchService(client, delay=delay).create_payment_links(
                make_records()[:2]
            )

        first, second = fake_api.timestamps
        # Allow for the event loop clock resolution
        assert second - first >= delay - 0.01


class TestCheckPaymentStatuses:
    @staticmethod
    def link(token: str) -> str:
        return f"https://paymentlink.mollie.com/payment/{token}/"

    @pytest.mark.asyncio
    async def test_logs_paid_and_unpaid(
        self, stub_client: StubPaymentLinkClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        stub_client.set_paid_at(self.link("a"), "2024-03-01T12:00:00+00:00")
        records = [
            PaymentLinkRecord(payment_link=self.link("a"), name="Alice", amount="12.50"),
            PaymentLinkRecord(payment_link=self.link("b"), name="Bob", amount="3.00"),
        ]

        with caplog.at_level(logging.INFO):
            results = await PaymentLinkBatchService(
                stub_client
            ).check_payment_statuses(records)

        assert [r.is_paid for r in results] == [True, False]
        assert (
            "Payment Request for Alice from 12.50 (id: pl_a) was paid at: "
            "2024-03-01T12:00:00+00:00" in caplog.text
        )
        assert "Payment Request for Bob from 3.00 (id: pl_b) was paid at: N/A" in (
            caplog.text
        )

    @pytest.mark.asyncio
    async def test_check_does_not_pace(self, stub_client: StubPaymentLinkClient) -> None:
        sleep = RecordingSleep()
        records = [
            PaymentLinkRecord(payment_link=self.link(t), name=t, amount="1.00")
            for t in ("a", "b", "c")
        ]

        await PaymentLinkBatchService(
            stub_client, delay=1.0, sleep=sleep
        ).check_payment_statuses(records)

        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_bad_rows_are_skipped(
        self, stub_client: StubPaymentLinkClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        stub_client.fail_for(self.link("gone"))
        records = [
            PaymentLinkRecord(payment_link="https://x/y", name="Mallory", amount="1.00"),
            PaymentLinkRecord(payment_link=self.link("gone"), name="Bob", amount="2.00"),
            PaymentLinkRecord(payment_link=self.link("ok"), name="Carol", amount="3.00"),
        ]

        with caplog.at_level(logging.INFO):
            results = await PaymentLinkBatchService(
                stub_client
            ).check_payment_statuses(records)

        assert [r.name for r in results] == ["Carol"]
        assert "Status check for Mallory failed" in caplog.text
        assert "Status check for Bob failed" in caplog.text
