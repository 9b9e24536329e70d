"""
TestPG client.

Approves card payments through the TestPG HTTP API. Claims even partner ids.
Card data travels only inside the AES-256-GCM encrypted `enc` field; the
API key is sent in clear in the API-KEY header for authentication.
"""
from datetime import datetime, timezone
from typing import Optional

import httpx
import structlog
from pydantic import ValidationError

from shared.config.settings import TestPgSettings
from services.payment_service.models import PaymentStatus

from .base import (
    ApprovalOutcome,
    Approved,
    ConfigurationError,
    Declined,
    PgApproveRequest,
    PgClient,
    TransportFault,
)
from .crypto import AesGcmEncryptor
from .dto import TestPgErrorResponse, TestPgPayload, TestPgRequest, TestPgSuccessResponse

logger = structlog.get_logger(__name__)

API_ENDPOINT = "/api/v1/pay/credit-card"
HEADER_API_KEY = "API-KEY"


class TestPgClient(PgClient):
    name = "test_pg"

    def __init__(self, settings: TestPgSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.encryptor = AesGcmEncryptor(settings.api_key, settings.iv)
        # A client passed in stays owned by the caller
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
        )

    def supports(self, partner_id: int) -> bool:
        return partner_id % 2 == 0

    async def approve(self, request: PgApproveRequest) -> ApprovalOutcome:
        logger.info("test_pg_approve_requested", partner_id=request.partner_id, amount=str(request.amount))

        body = TestPgRequest(enc=self._encrypt_payload(request))
        try:
            response = await self.http_client.post(
                API_ENDPOINT,
                json=body.model_dump(),
                headers={HEADER_API_KEY: self.settings.api_key},
            )
        except httpx.RequestError as exc:
            # Covers connect errors and timeouts
            logger.error("test_pg_transport_error", partner_id=request.partner_id, error=repr(exc))
            return TransportFault(f"TestPG request failed: {exc.__class__.__name__}")

        if response.is_success:
            return self._handle_success(response, request)
        return self._handle_error(response)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self.http_client.aclose()

    def _encrypt_payload(self, request: PgApproveRequest) -> str:
        # TestPG takes whole currency units only
        if request.amount != request.amount.to_integral_value():
            raise ValueError(f"TestPG amounts must be whole units, got {request.amount}")
        payload = TestPgPayload(
            card_number=request.card.card_number,
            birth_date=request.card.birth_date,
            expiry=request.card.expiry,
            password=request.card.password,
            amount=int(request.amount),
        )
        return self.encryptor.encrypt(payload.model_dump_json(by_alias=True))

    def _handle_success(self, response: httpx.Response, request: PgApproveRequest) -> ApprovalOutcome:
        try:
            body = TestPgSuccessResponse.model_validate(response.json())
            approved_at = datetime.fromisoformat(body.approved_at)
            payment_status = PaymentStatus(body.status)
        except (ValueError, ValidationError) as exc:
            logger.error("test_pg_unreadable_success", body=response.text, error=str(exc))
            return TransportFault("TestPG returned an unreadable success response")

        if body.amount != request.amount or body.masked_card_last4 != request.card.last4:
            logger.error(
                "test_pg_approval_mismatch",
                approval_code=body.approval_code,
                approved_amount=body.amount,
                requested_amount=str(request.amount),
            )
            return TransportFault("TestPG approved a different amount or card than requested")

        # approvedAt carries no zone; the processor reports UTC
        if approved_at.tzinfo is None:
            approved_at = approved_at.replace(tzinfo=timezone.utc)

        logger.info("test_pg_approved", approval_code=body.approval_code, status=payment_status.value)
        return Approved(
            approval_code=body.approval_code,
            approved_at=approved_at,
            status=payment_status,
        )

    def _handle_error(self, response: httpx.Response) -> ApprovalOutcome:
        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.error("test_pg_unauthorized", detail="API-KEY rejected by TestPG")
            return ConfigurationError("TestPG rejected the API key")

        if response.status_code == httpx.codes.UNPROCESSABLE_ENTITY:
            return self._handle_rejection(response)

        logger.error("test_pg_unexpected_status", status_code=response.status_code, body=response.text)
        return TransportFault(f"TestPG responded with HTTP {response.status_code}")

    def _handle_rejection(self, response: httpx.Response) -> Declined:
        try:
            error = TestPgErrorResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            logger.error("test_pg_unreadable_rejection", body=response.text)
            return Declined(reason=response.text or "TestPG rejected the payment")

        logger.warning(
            "test_pg_declined",
            code=error.code,
            error_code=error.error_code,
            message=error.message,
            reference_id=error.reference_id,
        )
        return Declined(reason=error.message, error_code=error.error_code)
