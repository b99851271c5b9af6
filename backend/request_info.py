"""
Request context: descriptive visit/action attributes from HTTP headers.

Nothing here is stored about the client beyond coarse labels: no IP,
no cookies, no full user-agent string. Attributes that cannot be
determined are left out of the returned dict.
"""

import ipaddress
import logging
import os
from typing import Dict, Mapping, Optional

import geoip2.database
import geoip2.errors

logger = logging.getLogger(__name__)


def parse_user_agent(ua: str):
    """
    Rough browser + OS + device classification (coarse on purpose).
    """
    ua_lower = ua.lower()

    # browser
    if "firefox" in ua_lower and "seamonkey" not in ua_lower:
        browser = "Firefox"
    elif "edg" in ua_lower:
        browser = "Edge"
    elif "chrome" in ua_lower and "chromium" not in ua_lower:
        browser = "Chrome"
    elif "safari" in ua_lower:
        browser = "Safari"
    elif "chromium" in ua_lower:
        browser = "Chromium"
    elif "msie" in ua_lower or "trident" in ua_lower:
        browser = "Internet Explorer"
    else:
        browser = None

    # OS
    if "windows" in ua_lower:
        os_name = "Windows"
    elif "iphone" in ua_lower or "ipad" in ua_lower:
        os_name = "iOS"
    elif "mac os x" in ua_lower or "macintosh" in ua_lower:
        os_name = "macOS"
    elif "android" in ua_lower:
        os_name = "Android"
    elif "linux" in ua_lower:
        os_name = "Linux"
    else:
        os_name = None

    # device
    if "ipad" in ua_lower or "tablet" in ua_lower:
        device_type = "tablet"
    elif "mobi" in ua_lower or "iphone" in ua_lower:
        device_type = "mobile"
    elif "android" in ua_lower:
        device_type = "tablet"
    elif ua_lower:
        device_type = "desktop"
    else:
        device_type = None

    return browser, os_name, device_type


def client_ip(headers: Mapping[str, str], peer: Optional[str]) -> Optional[str]:
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return peer


def preferred_language(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    first = header.split(",")[0].split(";")[0].strip()
    return first or None


class CountryLookup:
    """ISO country code from an IP using a local MaxMind database.

    The database is opened on first use. A missing file disables the
    lookup instead of failing requests.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._reader = None
        self._opened = False

    def _get_reader(self):
        if not self._opened:
            self._opened = True
            if os.path.exists(self.db_path):
                self._reader = geoip2.database.Reader(self.db_path)
            else:
                logger.info("GeoIP database not found at %s; country lookup disabled", self.db_path)
        return self._reader

    def country(self, raw_ip: Optional[str]) -> Optional[str]:
        if not raw_ip:
            return None
        try:
            if ipaddress.ip_address(raw_ip).is_private:
                return None
        except ValueError:
            return None
        reader = self._get_reader()
        if reader is None:
            return None
        try:
            resp = reader.country(raw_ip)
        except geoip2.errors.AddressNotFoundError:
            return None
        return resp.country.iso_code or resp.registered_country.iso_code

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None


def describe_request(
    headers: Mapping[str, str], peer: Optional[str], countries: CountryLookup
) -> Dict[str, str]:
    """Attributes shared by visits and actions: country, browser, os, deviceType."""
    browser, os_name, device_type = parse_user_agent(headers.get("user-agent", ""))
    info = {
        "country": countries.country(client_ip(headers, peer)),
        "browser": browser,
        "os": os_name,
        "deviceType": device_type,
    }
    return {k: v for k, v in info.items() if v is not None}


def describe_visit(
    headers: Mapping[str, str], peer: Optional[str], countries: CountryLookup
) -> Dict[str, str]:
    info = describe_request(headers, peer, countries)
    language = preferred_language(headers.get("accept-language"))
    if language:
        info["language"] = language
    info["referrer"] = headers.get("referer") or "Direct"
    return info
