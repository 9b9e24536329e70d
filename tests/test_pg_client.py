import json
from datetime import datetime, timezone
from decimal import Decimal

import httpx
import pytest

from services.payment_service.models import PaymentStatus
from services.pg_client.base import (
    Approved,
    CardData,
    ConfigurationError,
    Declined,
    PgApproveRequest,
    TransportFault,
)
from services.pg_client.crypto import AesGcmEncryptor
from services.pg_client.mock import MockPgClient
from services.pg_client.registry import PgClientRegistry, build_pg_registry
# Aliased so pytest does not try to collect them as test classes
from services.pg_client.testpg import API_ENDPOINT, HEADER_API_KEY
from services.pg_client.testpg import TestPgClient as PgHttpClient
from shared.config.settings import PgSettings
from shared.config.settings import TestPgSettings as PgHttpSettings
from shared.encoding import b64url_encode
from shared.errors import NoProcessorAvailableError
from tests.conftest import StubPgClient

SETTINGS = PgHttpSettings(
    base_url="https://pg.example.test",
    api_key="11111111-1111-4111-8111-111111111111",
    iv=b64url_encode(bytes(range(12))),
    timeout_seconds=1.0,
)

CARD = CardData(card_number="1111-1111-1111-1111", birth_date="19900101", expiry="1227", password="12")
REQUEST = PgApproveRequest(partner_id=2, amount=Decimal("10000"), card=CARD)


def make_test_pg(handler) -> PgHttpClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=SETTINGS.base_url)
    return PgHttpClient(SETTINGS, http_client=http_client)


class TestRegistryDispatch:

    def test_first_supporting_adapter_wins(self):
        even = StubPgClient(None, predicate=lambda pid: pid % 2 == 0, name="A")
        odd = StubPgClient(None, predicate=lambda pid: pid % 2 == 1, name="B")
        registry = PgClientRegistry([even, odd])

        assert registry.select(4) is even
        assert registry.select(7) is odd

    def test_registration_order_breaks_overlaps(self):
        first = StubPgClient(None, name="first")
        second = StubPgClient(None, name="second")

        assert PgClientRegistry([first, second]).select(1) is first
        assert PgClientRegistry([second, first]).select(1) is second

    def test_no_supporting_adapter(self):
        even = StubPgClient(None, predicate=lambda pid: pid % 2 == 0, name="A")
        registry = PgClientRegistry([even])

        with pytest.raises(NoProcessorAvailableError, match="No processor available"):
            registry.select(3)

    def test_empty_registry(self):
        with pytest.raises(NoProcessorAvailableError):
            PgClientRegistry([]).select(1)


class TestBuildRegistry:

    def test_without_api_key_test_pg_is_not_registered(self):
        settings = PgSettings(
            test_pg=PgHttpSettings(base_url=SETTINGS.base_url, api_key="", iv="", timeout_seconds=1.0),
            mock_pg_enabled=True,
        )

        registry = build_pg_registry(settings)

        assert [c.name for c in registry.clients] == ["mock_pg"]

    @pytest.mark.asyncio
    async def test_test_pg_registered_before_mock(self):
        registry = build_pg_registry(PgSettings(test_pg=SETTINGS, mock_pg_enabled=True))

        assert [c.name for c in registry.clients] == ["test_pg", "mock_pg"]
        assert registry.select(2).name == "test_pg"
        assert registry.select(3).name == "mock_pg"
        await registry.aclose()

    def test_invalid_iv_fails_startup(self):
        broken = PgHttpSettings(base_url=SETTINGS.base_url, api_key="key", iv="c2hvcnQ", timeout_seconds=1.0)

        with pytest.raises(ValueError):
            build_pg_registry(PgSettings(test_pg=broken, mock_pg_enabled=False))


class TestMockPgClient:

    def test_supports_odd_partners_only(self):
        client = MockPgClient()

        assert client.supports(1)
        assert not client.supports(2)

    @pytest.mark.asyncio
    async def test_approves(self):
        outcome = await MockPgClient().approve(REQUEST)

        assert isinstance(outcome, Approved)
        assert outcome.approval_code.startswith("MOCK-")


class TestTestPgClient:

    def test_supports_even_partners_only(self):
        client = make_test_pg(lambda request: httpx.Response(500))

        assert client.supports(2)
        assert client.supports(4)
        assert not client.supports(1)

    @pytest.mark.asyncio
    async def test_success_sends_encrypted_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["api_key"] = request.headers[HEADER_API_KEY]
            body = json.loads(request.content)
            seen["body_keys"] = set(body)
            seen["payload"] = json.loads(AesGcmEncryptor(SETTINGS.api_key, SETTINGS.iv).decrypt(body["enc"]))
            return httpx.Response(200, json={
                "approvalCode": "10080728",
                "approvedAt": "2026-01-14T12:00:00",
                "maskedCardLast4": "1111",
                "amount": 10000,
                "status": "APPROVED",
            })

        client = make_test_pg(handler)
        outcome = await client.approve(REQUEST)
        await client.aclose()

        assert seen["path"] == API_ENDPOINT
        assert seen["api_key"] == SETTINGS.api_key
        assert seen["body_keys"] == {"enc"}
        assert seen["payload"] == {
            "cardNumber": "1111-1111-1111-1111",
            "birthDate": "19900101",
            "expiry": "1227",
            "password": "12",
            "amount": 10000,
        }
        assert outcome == Approved(
            approval_code="10080728",
            approved_at=datetime(2026, 1, 14, 12, 0, tzinfo=timezone.utc),
            status=PaymentStatus.APPROVED,
        )

    @pytest.mark.asyncio
    async def test_card_number_never_sent_in_clear(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["raw"] = request.content.decode()
            return httpx.Response(500)

        client = make_test_pg(handler)
        await client.approve(REQUEST)
        await client.aclose()

        assert "1111-1111-1111-1111" not in seen["raw"]
        assert "19900101" not in seen["raw"]

    @pytest.mark.asyncio
    async def test_422_is_a_decline(self):
        client = make_test_pg(lambda request: httpx.Response(422, json={
            "code": 1002,
            "errorCode": "INSUFFICIENT_LIMIT",
            "message": "한도가 초과되었습니다.",
            "referenceId": "ref-1",
        }))

        outcome = await client.approve(REQUEST)
        await client.aclose()

        assert outcome == Declined(reason="한도가 초과되었습니다.", error_code="INSUFFICIENT_LIMIT")

    @pytest.mark.asyncio
    async def test_unreadable_422_is_still_a_decline(self):
        client = make_test_pg(lambda request: httpx.Response(422, text="rejected"))

        outcome = await client.approve(REQUEST)
        await client.aclose()

        assert isinstance(outcome, Declined)
        assert outcome.reason == "rejected"

    @pytest.mark.asyncio
    async def test_401_is_a_configuration_error(self):
        client = make_test_pg(lambda request: httpx.Response(401))

        outcome = await client.approve(REQUEST)
        await client.aclose()

        assert isinstance(outcome, ConfigurationError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 404, 500, 503])
    async def test_other_errors_are_transport_faults(self, status_code):
        client = make_test_pg(lambda request: httpx.Response(status_code))

        outcome = await client.approve(REQUEST)
        await client.aclose()

        assert isinstance(outcome, TransportFault)
        assert str(status_code) in outcome.detail

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [httpx.ConnectError, httpx.ReadTimeout])
    async def test_network_errors_are_transport_faults(self, error):
        def handler(request: httpx.Request) -> httpx.Response:
            raise error("network down", request=request)

        client = make_test_pg(handler)
        outcome = await client.approve(REQUEST)
        await client.aclose()

        assert isinstance(outcome, TransportFault)

    @pytest.mark.asyncio
    async def test_unreadable_success_is_a_transport_fault(self):
        client = make_test_pg(lambda request: httpx.Response(200, json={"approvalCode": "x"}))

        outcome = await client.approve(REQUEST)
        await client.aclose()

        assert isinstance(outcome, TransportFault)

    @pytest.mark.asyncio
    async def test_unknown_status_is_a_transport_fault(self):
        client = make_test_pg(lambda request: httpx.Response(200, json={
            "approvalCode": "10080728",
            "approvedAt": "2026-01-14T12:00:00",
            "maskedCardLast4": "1111",
            "amount": 10000,
            "status": "PENDING_REVIEW",
        }))

        outcome = await client.approve(REQUEST)
        await client.aclose()

        assert isinstance(outcome, TransportFault)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "amount, last4",
        [(9999, "1111"), (10000, "2222")],
    )
    async def test_approval_for_something_else_is_a_transport_fault(self, amount, last4):
        client = make_test_pg(lambda request: httpx.Response(200, json={
            "approvalCode": "10080728",
            "approvedAt": "2026-01-14T12:00:00",
            "maskedCardLast4": last4,
            "amount": amount,
            "status": "APPROVED",
        }))

        outcome = await client.approve(REQUEST)

        assert isinstance(outcome, TransportFault)

    @pytest.mark.asyncio
    async def test_fractional_amount_is_never_sent(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        client = make_test_pg(handler)

        with pytest.raises(ValueError, match="whole units"):
            await client.approve(PgApproveRequest(partner_id=2, amount=Decimal("100.99"), card=CARD))
        assert calls == []

    @pytest.mark.asyncio
    async def test_aclose_leaves_a_shared_http_client_open(self):
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
            base_url=SETTINGS.base_url,
        )
        client = PgHttpClient(SETTINGS, http_client=http_client)

        await client.aclose()

        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_aclose_closes_its_own_http_client(self):
        client = PgHttpClient(SETTINGS)

        await client.aclose()

        assert client.http_client.is_closed
