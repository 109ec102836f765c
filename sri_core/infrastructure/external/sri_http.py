# sri_core/infrastructure/external/sri_http.py
import html
from typing import Optional

import httpx

import config


def build_client(
    base_url: str = config.SRI_BASE_URL,
    timeout_seconds: float = config.SRI_TIMEOUT_SECONDS,
    verify_ssl: bool = config.SRI_VERIFY_SSL,
    user_agent: str = config.SRI_USER_AGENT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Cliente asíncrono con su propio cookie jar. Cada resolución de identidad
    abre uno nuevo: el jar ES la sesión y no se comparte.
    """
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout_seconds,
        verify=verify_ssl,
        transport=transport,
        headers={"User-Agent": user_agent, "Accept": "application/json, text/plain, */*"},
    )


def decode_body(response: httpx.Response) -> str:
    """El SRI codifica sus respuestas como entidades HTML; se decodifican antes del JSON."""
    return html.unescape(response.text).strip()


def transport_reason(exc: httpx.HTTPError) -> str:
    return "timeout" if isinstance(exc, httpx.TimeoutException) else "transport"


def strip_array_wrapper(body: str) -> str:
    """`[ {...} ]` -> `{...}`. Solo se quitan los corchetes externos."""
    body = body.strip()
    if body.startswith("[") and body.endswith("]"):
        return body[1:-1].strip()
    return body
