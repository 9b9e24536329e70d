"""
Domain failures raised by the payment core.

Each carries the HTTP status the API layer answers with, so routers never
have to branch on exception types. Processor declines are not errors: they
are persisted as DECLINED payments.
"""
from fastapi import status


class PaymentError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "PAYMENT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- Validation ---

class UnknownPartnerError(PaymentError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "UNKNOWN_PARTNER"

    def __init__(self, partner_id: int):
        super().__init__(f"Partner not found: {partner_id}")
        self.partner_id = partner_id


class InactivePartnerError(PaymentError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "INACTIVE_PARTNER"

    def __init__(self, partner_id: int):
        super().__init__(f"Partner is inactive: {partner_id}")
        self.partner_id = partner_id


# --- Configuration (fatal for the attempt, needs an operator) ---

class FeePolicyNotFoundError(PaymentError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "NO_FEE_POLICY"

    def __init__(self, partner_id: int):
        super().__init__(f"No fee policy found for partner {partner_id}")
        self.partner_id = partner_id


class NoProcessorAvailableError(PaymentError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "NO_PROCESSOR_AVAILABLE"

    def __init__(self, partner_id: int):
        super().__init__(f"No processor available for partner {partner_id}")
        self.partner_id = partner_id


class ProcessorConfigurationError(PaymentError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "PROCESSOR_CONFIGURATION"


# --- Transport ---

class ProcessorFaultError(PaymentError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "PROCESSOR_FAULT"


# --- Crypto ---

class PayloadDecryptionError(Exception):
    """Ciphertext failed authentication or could not be decoded."""
