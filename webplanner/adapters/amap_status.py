"""AMap REST envelope checks shared by the geocoding and weather adapters.

AMap answers HTTP 200 even for business errors; the outcome lives in the
``status`` / ``info`` / ``infocode`` fields of the JSON body.
"""

from __future__ import annotations

from typing import Any

import httpx

from ..domain.errors import ProviderResponseError, TerminalError

# infocodes caused by the key itself (invalid, unauthorized, over quota)
KEY_INFOCODES = frozenset(
    {"10001", "10003", "10005", "10006", "10007", "10009", "10044"}
)


def amap_payload(
    response: httpx.Response, provider: str, url: str
) -> dict[str, Any]:
    """Decode an AMap response body and raise on business errors.

    Raises:
        ProviderResponseError: Body is not a JSON object.
        TerminalError: ``status`` is not "1".
    """
    try:
        payload = response.json()
    except ValueError as e:
        raise ProviderResponseError(
            f"{provider} returned a non-JSON body", provider=provider, cause=e
        )
    if not isinstance(payload, dict):
        raise ProviderResponseError(
            f"{provider} returned an unexpected payload", provider=provider
        )

    if str(payload.get("status")) != "1":
        info = str(payload.get("info", "unknown error"))
        infocode = str(payload.get("infocode", ""))
        raise TerminalError(
            f"{provider} rejected the request: {info}",
            url=url,
            status_code=response.status_code,
            detail=f"{info} ({infocode})" if infocode else info,
            credentials_rejected=infocode in KEY_INFOCODES,
        )
    return payload

