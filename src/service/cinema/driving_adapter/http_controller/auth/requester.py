from typing import Annotated

from fastapi import Header


async def get_requester_id(
    x_user_id: Annotated[int, Header(description='Id of the user making the request', gt=0)],
) -> int:
    """
    Identify the caller.

    Authentication lives in front of this service; the gateway forwards the
    authenticated user's id in the X-User-Id header.
    """
    return x_user_id
