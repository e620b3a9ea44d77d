"""OAuth2 password grant against Concourse's ``/sky/token`` endpoint."""

from __future__ import annotations

import logging

import httpx

from .credentials import CredentialStore
from .exceptions import (
    AuthenticationRejectedError,
    ConcourseApiError,
    MalformedTokenResponseError,
    NetworkError,
)
from .models.targets import Target

logger = logging.getLogger(__name__)

# Public client registered by Concourse for the fly CLI.
CLIENT_ID = "fly"
CLIENT_SECRET = "Zmx5"
SCOPES = ("openid", "profile", "email", "federated:id", "groups")


async def acquire_token(
    base_url: str,
    username: str,
    password: str,
    *,
    insecure: bool = False,
    timeout: int = 30,
) -> tuple[str, str]:
    """Exchange a username and password for ``(token_type, access_token)``."""
    token_url = f"{base_url.rstrip('/')}/sky/token"
    data = {
        "grant_type": "password",
        "username": username,
        "password": password,
        "scope": " ".join(SCOPES),
    }

    logger.debug("POST %s", token_url)
    try:
        async with httpx.AsyncClient(timeout=timeout, verify=not insecure) as client:
            resp = await client.post(
                token_url,
                data=data,
                auth=(CLIENT_ID, CLIENT_SECRET),
                headers={"Accept": "application/json"},
            )
    except httpx.TransportError as e:
        raise NetworkError(f"Could not reach {token_url}: {e}") from e
    logger.debug("Response Code: %s", resp.status_code)

    if 400 <= resp.status_code < 500:
        raise AuthenticationRejectedError(
            resp.status_code, resp.reason_phrase or "", resp.text[:500]
        )
    if not resp.is_success:
        raise ConcourseApiError(resp.status_code, resp.reason_phrase or "", resp.text[:500])

    try:
        payload = resp.json()
    except ValueError as e:
        raise MalformedTokenResponseError(f"Token response is not JSON: {e}") from e
    if not isinstance(payload, dict) or not payload.get("access_token"):
        msg = "Token response has no access_token"
        raise MalformedTokenResponseError(msg)

    return str(payload.get("token_type") or "Bearer"), str(payload["access_token"])


async def login(
    store: CredentialStore,
    name: str,
    url: str,
    team: str,
    username: str,
    password: str,
    *,
    insecure: bool = False,
    timeout: int = 30,
) -> Target:
    """Acquire a token, save it under *name* and return the resulting target.

    Nothing is written to the store when the token cannot be acquired.
    """
    token_type, token_value = await acquire_token(
        url, username, password, insecure=insecure, timeout=timeout
    )
    store.save(name, url, team, token_type, token_value, insecure)
    return store.load(name)
