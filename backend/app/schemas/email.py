"""Pydantic schemas for the email sending API"""
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

Recipients = Union[EmailStr, List[EmailStr]]


def _normalize_address(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class SendEmailRequest(BaseModel):
    """Body of POST /api/v1/emails/send

    `to` and `replyTo` accept lists so that multi-recipient requests reach
    the send pipeline, which rejects them with a dedicated error.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_email: str = Field(alias="from", max_length=255)
    to: Recipients
    reply_to: Optional[Recipients] = Field(default=None, alias="replyTo")
    subject: str = Field(max_length=998)
    text: Optional[str] = None
    html: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("from_email", "subject", mode="before")
    @classmethod
    def strip_required(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise PydanticCustomError("string_empty", "Value must not be empty")
        return v

    @field_validator("to", "reply_to", mode="before")
    @classmethod
    def normalize_recipients(cls, v):
        if isinstance(v, list):
            return [_normalize_address(item) for item in v]
        return _normalize_address(v)

    @field_validator("text", "html", mode="before")
    @classmethod
    def strip_body(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("headers")
    @classmethod
    def strip_headers(cls, v: Dict[str, str]) -> Dict[str, str]:
        headers = {}
        for name, value in v.items():
            name, value = name.strip(), value.strip()
            if not name or not value:
                raise PydanticCustomError("header_empty", "Header names and values must not be empty")
            headers[name] = value
        return headers

    @model_validator(mode="after")
    def require_body(self):
        # An empty string still counts as a supplied body
        if self.text is None and self.html is None:
            raise PydanticCustomError("body_missing", "Either text or html is required.")
        return self

    @property
    def has_multiple_recipients(self) -> bool:
        return isinstance(self.to, list) or isinstance(self.reply_to, list)


class SendEmailResponse(BaseModel):
    id: str
