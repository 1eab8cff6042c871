"""Coarse, non-personal device info derived from request headers."""
from typing import Optional

from fastapi import Request

from app.schemas.quiz import DeviceInfo


def get_device_type(user_agent: Optional[str]) -> str:
    if not user_agent:
        return "desktop"

    ua = user_agent.lower()
    if "mobile" in ua:
        return "mobile"
    if "tablet" in ua or "ipad" in ua:
        return "tablet"
    return "desktop"


def get_browser_type(user_agent: Optional[str]) -> str:
    if not user_agent:
        return "unknown"

    ua = user_agent.lower()
    # Order matters: Chrome and Edge UAs also mention Safari
    for browser in ("chrome", "firefox", "safari", "edge", "opera"):
        if browser in ua:
            return browser
    return "unknown"


def device_info_from_request(request: Request) -> DeviceInfo:
    user_agent = request.headers.get("user-agent")
    return DeviceInfo(
        device_type=get_device_type(user_agent),
        browser_type=get_browser_type(user_agent),
        # Cloudflare country code only, never the IP itself
        ip_country=request.headers.get("cf-ipcountry") or "unknown",
    )
