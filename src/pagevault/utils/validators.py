"""
URL Validation Utilities

This module provides URL validation for snapshot capture targets.
Only absolute http(s) URLs with a host are accepted; nothing is added
or rewritten, so the URL recorded in metadata is exactly the one given.
"""

import ipaddress
import re
from urllib.parse import urlparse
from typing import Tuple, Optional
import logging

from pagevault.core.errors import InvalidInputError


ALLOWED_SCHEMES = ('http', 'https')


class URLValidator:
    """
    Validates capture target URLs.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        # Hostnames made of dot-separated labels
        self.domain_pattern = re.compile(
            r'^[a-zA-Z0-9]([a-zA-Z0-9\-_]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-_]{0,61}[a-zA-Z0-9])?)*\.?$'
        )

    def validate(self, url: str) -> Tuple[bool, str, str]:
        """
        Validate a URL for capture.

        Args:
            url: The URL to validate

        Returns:
            Tuple of (is_valid, url, error_message)
        """
        if not url or not isinstance(url, str):
            return False, "", "target URL is required"

        if url != url.strip() or any(ch.isspace() for ch in url):
            return False, "", "URL must not contain whitespace"

        try:
            parsed = urlparse(url)

            if not parsed.scheme:
                return False, "", "URL must be absolute (missing scheme)"

            if parsed.scheme.lower() not in ALLOWED_SCHEMES:
                return False, "", "URL must use http or https protocol"

            if not parsed.netloc:
                return False, "", "URL must have a host"

            host = parsed.hostname
            if not host:
                return False, "", "URL must have a host"

            # Accessing .port raises ValueError for out-of-range or non-numeric ports
            parsed.port

            if not self._is_valid_host(host):
                return False, "", f"Invalid host: {host}"

            return True, url, ""

        except ValueError as e:
            return False, "", f"invalid URL provided - {e}"

    def _is_valid_host(self, host: str) -> bool:
        """Accept DNS-style hostnames (including IDNs) and IPv4/IPv6 literals."""
        try:
            ipaddress.ip_address(host)
            return True
        except ValueError:
            pass

        # Internationalized labels are checked in their punycode form
        try:
            ascii_host = host.encode('idna').decode('ascii')
        except UnicodeError:
            return False
        return bool(self.domain_pattern.match(ascii_host))


# Global validator instance
_validator_instance: Optional[URLValidator] = None


def get_validator() -> URLValidator:
    """
    Get the global URL validator instance.

    Returns:
        URLValidator instance
    """
    global _validator_instance
    if _validator_instance is None:
        _validator_instance = URLValidator()
    return _validator_instance


def validate_url(url: str) -> Tuple[bool, str, str]:
    """
    Validate a capture target URL.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, url, error_message)
    """
    return get_validator().validate(url)


def require_capture_url(url: str) -> str:
    """
    Validate a capture target, raising on failure.

    Args:
        url: URL to validate

    Returns:
        The URL, unchanged

    Raises:
        InvalidInputError: If the URL is not an absolute http(s) URL
    """
    is_valid, checked, error = validate_url(url)
    if not is_valid:
        raise InvalidInputError(error)
    return checked
