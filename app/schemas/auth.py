"""
Auth Schemas
============

Request schemas for the session endpoints.
"""

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """Email/password pair for sign-in and sign-up."""

    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)
