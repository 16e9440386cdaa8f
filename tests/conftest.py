from __future__ import annotations

import pytest

from ad_users.services import UserService

from .support.ad import FakeADClient


@pytest.fixture
def ad_client() -> FakeADClient:
    client = FakeADClient()
    client.add_user("jdoe", cn="John Doe", mail="jdoe@corp.example.com")
    return client


@pytest.fixture
def service(ad_client: FakeADClient) -> UserService:
    return UserService(ad_client)
