"""Mailgun API schemas."""

from pydantic import BaseModel, Field


class MailgunMessage(BaseModel):
    """Form fields of POST /{domain}/messages."""

    sender: str = Field(alias="from")
    to: str
    subject: str
    html: str | None = None
    text: str | None = None

    class Config:
        populate_by_name = True

    def form(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class MailgunResponse(BaseModel):
    """Mailgun accept response."""

    id: str | None = None
    message: str = ""
