"""
NoteWise Backend - Request Identity Dependency
==============================================

What:  Resolves the note owner for the current request.
How:   Reads the `X-User-Id` header that the authentication layer in front of
       this API (session verification happens there) forwards after login.
Who:   Every owner-scoped route, via Depends(get_current_user_id).
"""

from typing import Optional
from uuid import UUID

from fastapi import Header

from notewise.exceptions import AuthenticationError

USER_ID_HEADER = "X-User-Id"


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> UUID:
    """
    Raises:
        AuthenticationError: header missing or not a UUID (→ 401).
    """
    if not x_user_id:
        raise AuthenticationError()
    try:
        return UUID(x_user_id)
    except ValueError:
        raise AuthenticationError(
            message="Login is required.",
            context={"reason": "malformed user id"},
        )
