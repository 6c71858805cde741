# app/schemas/user.py

from pydantic import BaseModel, Field


class User(BaseModel):
    """User record served by the demo handlers; field names are the wire names."""
    Id: int = Field(..., description="Numeric identifier of the user.")
    Name: str = Field(..., description="Display name.")
    IsActive: bool = Field(True, description="Whether the user is active.")
