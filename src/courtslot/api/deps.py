"""Request-scoped dependencies shared by the routers."""

from fastapi import Header, HTTPException

from courtslot.config import get_settings
from courtslot.domain.policy import PolicySettings


async def get_requester_id(x_user_id: int | None = Header(default=None)) -> int:
    """Authenticated requester id, supplied by the identity layer in front of us."""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def get_policy() -> PolicySettings:
    return PolicySettings.from_settings(get_settings())
