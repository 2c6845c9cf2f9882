"""
Token endpoint transport: form-encoded POST to {domain}/oauth2/token with the Kinde-SDK header.
Shared by the authorization-code exchange and the refresh grant.
"""
import logging
from dataclasses import dataclass

import httpx

from kinde_session.config import PLATFORM_TAG, TOKEN_PATH, TOKEN_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


@dataclass
class FrameworkSettings:
    """Identity of the framework SDK embedding this engine; set by the host at startup."""

    framework: str = ""
    framework_version: str = ""
    sdk_version: str = ""


framework_settings = FrameworkSettings()


def sdk_header(settings: FrameworkSettings | None = None) -> str:
    """framework/sdkVersion/frameworkVersion/Python; missing parts are omitted."""
    settings = settings or framework_settings
    parts = [settings.framework, settings.sdk_version, settings.framework_version]
    return "/".join([p for p in parts if p] + [PLATFORM_TAG])


def sanitize_url(url: str) -> str:
    """Strip trailing slashes so paths can be appended."""
    return url.rstrip("/")


def token_endpoint(domain: str) -> str:
    return f"{sanitize_url(domain)}{TOKEN_PATH}"


async def post_token_request(domain: str, body: dict[str, str]) -> httpx.Response:
    """
    POST body (form-encoded) to the token endpoint of domain. Returns the response as-is;
    status handling is the caller's. Transport errors (httpx.HTTPError) propagate.
    """
    url = token_endpoint(domain)
    logger.debug("Token request grant_type=%s to %s", body.get("grant_type"), url)
    async with httpx.AsyncClient(timeout=TOKEN_REQUEST_TIMEOUT) as client:
        return await client.post(
            url,
            data=body,
            headers={
                "Content-Type": FORM_CONTENT_TYPE,
                "Accept": "application/json",
                "Kinde-SDK": sdk_header(),
            },
        )


def token_payload(response: httpx.Response) -> dict:
    """JSON object of a token response; {} when the body is not a JSON object."""
    try:
        data = response.json()
    except ValueError:
        logger.debug("Token response body is not JSON (status %s)", response.status_code)
        return {}
    return data if isinstance(data, dict) else {}
