"""
Shared helpers for routers.

Dependencies: fastapi
System role: Request body handling shared by the indexing endpoints
"""

from typing import Any

from fastapi import Request


async def read_json_body(request: Request) -> Any:
    """
    Read a JSON request body, treating an empty or malformed body as {}.

    Endpoints read the body themselves so that authorization is decided
    before the body is validated.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return await request.json()
    except ValueError:
        return {}
