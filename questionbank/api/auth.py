import logging
from typing import List

from fastapi import APIRouter
from pydantic import BaseModel, field_validator

from questionbank.core.auth import KNOWN_ROLES, STUDENT, create_token

logger = logging.getLogger(__name__)

router = APIRouter()


class MockLogin(BaseModel):
    email: str
    roles: List[str] = [STUDENT]

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("not an email address")
        return v

    @field_validator("roles")
    @classmethod
    def known_roles(cls, v: List[str]) -> List[str]:
        unknown = [r for r in v if r not in KNOWN_ROLES]
        if unknown:
            raise ValueError(f"unknown roles: {', '.join(unknown)}")
        return v


@router.post("/mock-login")
def mock_login(payload: MockLogin):
    """Development login: the token subject is the participant's email."""
    token = create_token(payload.email, payload.roles)
    logger.info(f"Issued token for {payload.email} ({', '.join(payload.roles)})")
    return {"access_token": token, "token_type": "bearer", "user": payload.email, "roles": payload.roles}
