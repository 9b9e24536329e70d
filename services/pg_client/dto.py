"""TestPG wire models (camelCase on the wire)."""
from pydantic import BaseModel, Field


class TestPgPayload(BaseModel):
    """Plaintext that is JSON-serialized and then AES-GCM encrypted."""
    card_number: str = Field(alias="cardNumber")
    birth_date: str = Field(alias="birthDate")
    expiry: str
    password: str
    amount: int

    class Config:
        populate_by_name = True


class TestPgRequest(BaseModel):
    enc: str


class TestPgSuccessResponse(BaseModel):
    approval_code: str = Field(alias="approvalCode")
    approved_at: str = Field(alias="approvedAt")
    masked_card_last4: str = Field(alias="maskedCardLast4")
    amount: int
    status: str

    class Config:
        populate_by_name = True


class TestPgErrorResponse(BaseModel):
    code: int
    error_code: str = Field(alias="errorCode")
    message: str
    reference_id: str = Field(alias="referenceId")

    class Config:
        populate_by_name = True
