import pytest

from fakes import RING_PAYLOAD, FakeKeyServerClient, parse_fake_ring


@pytest.fixture
def key_ring():
    return parse_fake_ring(RING_PAYLOAD)


@pytest.fixture
def ring_client():
    return FakeKeyServerClient("keys.example.com", payload=RING_PAYLOAD)
