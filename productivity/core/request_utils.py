"""Request helpers."""

import ipaddress
import logging

from fastapi import Request

logger = logging.getLogger(__name__)

_LOCAL_PROXIES = ("127.0.0.1", "::1", "localhost")


def _is_valid_ip(ip_str: str) -> bool:
    try:
        ipaddress.ip_address(ip_str)
        return True
    except ValueError:
        return False


def get_client_ip(request: Request) -> str:
    """Get the client IP address used for login throttling.

    X-Real-IP is honoured only when the direct peer is a local reverse proxy;
    X-Forwarded-For is never trusted because any client can set it.
    """
    peer = request.client.host if request.client else None

    if peer in _LOCAL_PROXIES:
        real_ip = (request.headers.get("X-Real-IP") or "").strip()
        if real_ip:
            if _is_valid_ip(real_ip):
                return real_ip
            logger.warning(f"Invalid X-Real-IP: {real_ip}")

    return peer or "unknown"
