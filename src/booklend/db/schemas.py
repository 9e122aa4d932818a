"""Pydantic schemas for owners and books."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class OwnerCreate(BaseModel):
    """Schema for creating an owner."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)

    @field_validator("email")
    @classmethod
    def email_has_at(cls, v: str) -> str:
        """Reject addresses without a mailbox and domain part."""
        v = v.strip()
        if "\r" in v or "\n" in v:
            raise ValueError("email must not contain line breaks")
        local, sep, domain = v.partition("@")
        if not sep or not local or not domain:
            raise ValueError("email must look like name@domain")
        return v


class BookCreate(BaseModel):
    """Schema for creating a book."""

    owner_id: str
    title: str = Field(..., min_length=1, max_length=500)
    author: Optional[str] = Field(None, max_length=500)
    isbn: Optional[str] = Field(None, max_length=13)
