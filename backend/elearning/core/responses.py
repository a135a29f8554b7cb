"""
Success envelope for the Visnet E-Learning API.
"""

from typing import Any, Dict, Optional

from fastapi import Request


def success(data: Optional[Dict[str, Any]] = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Wrap a payload as ``{"status": "SUCCESS", "message"?, "data"?}``."""
    body: Dict[str, Any] = {"status": "SUCCESS"}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None
