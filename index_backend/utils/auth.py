"""
Authentication utilities for Book Index API

The API Gateway authorizer validates the caller's bearer token before the
handler runs; handlers only read the subject claim it forwards.
"""


def get_user_id(event: dict) -> str | None:
    """
    Extract user ID (sub) from the authorizer context.

    Supports Cognito user pool authorizers (REST APIs) and JWT authorizers
    (HTTP APIs).

    Args:
        event: API Gateway event with authorization context

    Returns:
        str: The user's sub (unique identifier), or None if not present
    """
    request_context = event.get("requestContext") or {}
    authorizer = request_context.get("authorizer") or {}
    claims = authorizer.get("claims") or (authorizer.get("jwt") or {}).get("claims") or {}
    return claims.get("sub")
