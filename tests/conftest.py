"""Shared pytest fixtures for csv-to-plinks tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from plinks.envs.cli_env import Settings
from tests.fixtures import FakePaymentLinksAPI, StubPaymentLinkClient


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str, str], str]:
    """Write `content` to `tmp_path/name` and return the path as a string."""

    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def input_csv(write_csv: Callable[[str, str], str]) -> str:
    """A three-row creation input file."""
    return write_csv(
        "data.csv",
        "name,amount_owed,item_ordered\n"
        "Alice,12.5,Pizza\n"
        "Bob,3,Coffee\n"
        # 7.125 is a tie; it formats as "7.12" (half to even)
        "Carol,7.125,Bagel\n",
    )


@pytest.fixture
def fake_api() -> FakePaymentLinksAPI:
    return FakePaymentLinksAPI()


@pytest.fixture
def stub_client() -> StubPaymentLinkClient:
    return StubPaymentLinkClient()


@pytest.fixture
def settings() -> Settings:
    """Settings with pacing disabled so batch tests run instantly."""
    return Settings(api_base_url="https://api.test/v2", request_delay=0.0)
