from __future__ import annotations

import requests

IPIFY_URL = "https://api.ipify.org?format=json"


class PublicIPLookupError(RuntimeError):
    pass


def fetch_public_ip(*, url: str = IPIFY_URL, timeout: float = 5.0) -> str:
    """Ask ipify for this machine's public address.

    Used by the operator console to pre-fill the set-ip form.
    """
    try:
        r = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise PublicIPLookupError(f"Public IP lookup failed: {e.__class__.__name__}") from e

    if r.status_code != 200:
        raise PublicIPLookupError(f"Public IP lookup failed (HTTP {r.status_code})")

    try:
        data = r.json()
    except ValueError as e:
        raise PublicIPLookupError("Public IP lookup returned invalid JSON") from e

    ip = data.get("ip") if isinstance(data, dict) else None
    if not isinstance(ip, str) or not ip.strip():
        raise PublicIPLookupError("Public IP lookup returned no address")
    return ip.strip()
