# orayata/services/references/sefaria_client.py
"""
Sefaria catalogue client for link validation.

Probes the Sefaria text API with a HEAD request to check whether a
canonical link points at a real text. Network trouble is reported as
UNREACHABLE, never as INVALID, so callers can tell "the link is wrong"
apart from "we couldn't ask".
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests

from orayata.core.config import get_catalogue_settings

from .sefaria_links import MalformedReference, extract_ref_path

logger = logging.getLogger(__name__)


class LinkStatus(Enum):
    """Outcome of a catalogue probe."""
    VALID = "valid"
    INVALID = "invalid"
    UNREACHABLE = "unreachable"


@dataclass
class ValidationOutcome:
    """
    Result of checking a link against the catalogue.

    Attributes:
        status: VALID, INVALID or UNREACHABLE
        url: The link that was checked
        reason: Why the link is invalid or unreachable (None when valid)
        http_status: Status code of the probe, if one was received
    """
    status: LinkStatus
    url: str
    reason: Optional[str] = None
    http_status: Optional[int] = None

    @property
    def is_valid(self) -> bool:
        return self.status == LinkStatus.VALID

    @property
    def is_invalid(self) -> bool:
        return self.status == LinkStatus.INVALID

    @property
    def is_unreachable(self) -> bool:
        return self.status == LinkStatus.UNREACHABLE

    @classmethod
    def valid(cls, url: str, http_status: Optional[int] = None) -> "ValidationOutcome":
        return cls(LinkStatus.VALID, url, http_status=http_status)

    @classmethod
    def invalid(cls, url: str, reason: str, http_status: Optional[int] = None) -> "ValidationOutcome":
        return cls(LinkStatus.INVALID, url, reason=reason, http_status=http_status)

    @classmethod
    def unreachable(cls, url: str, reason: str, http_status: Optional[int] = None) -> "ValidationOutcome":
        return cls(LinkStatus.UNREACHABLE, url, reason=reason, http_status=http_status)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "url": self.url,
            "reason": self.reason,
            "http_status": self.http_status,
        }


class SefariaClient:
    """
    Client for probing the Sefaria text API.

    The HTTP session is injectable: anything with a requests-style
    head(url, timeout=..., allow_redirects=...) method works.

    Usage:
        client = SefariaClient()
        outcome = client.check_reachable("https://www.sefaria.org/Genesis.1.1-3")
        if outcome.is_valid:
            print("Link resolves")
    """

    def __init__(
        self,
        session=None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_catalogue_settings()
        self.session = session or requests.Session()
        self.base_url = (base_url or settings["base_url"]).rstrip("/")
        self._request_timeout = timeout or settings["probe_timeout_seconds"]

    def text_api_url(self, ref_path: str) -> str:
        """Return the text API endpoint for a decoded reference path."""
        return f"{self.base_url}/api/texts/{ref_path}"

    def check_reachable(self, url: str) -> ValidationOutcome:
        """
        Check a link against the catalogue.

        2xx -> VALID; 4xx -> INVALID("not-found"); network errors,
        timeouts and any other status -> UNREACHABLE.

        Args:
            url: Canonical Sefaria link

        Returns:
            ValidationOutcome
        """
        try:
            ref_path = extract_ref_path(url)
        except MalformedReference:
            return ValidationOutcome.invalid(url, "malformed-url")

        if not ref_path:
            return ValidationOutcome.invalid(url, "missing-reference")

        api_url = self.text_api_url(ref_path)

        try:
            logger.debug(f"Probing {api_url}")
            response = self.session.head(
                api_url,
                timeout=self._request_timeout,
                allow_redirects=True,
            )
        except requests.Timeout:
            logger.warning(f"Sefaria probe timed out after {self._request_timeout}s: {url}")
            return ValidationOutcome.unreachable(url, "timeout")
        except requests.RequestException as e:
            logger.warning(f"Network error probing {url}: {e}")
            return ValidationOutcome.unreachable(url, f"network-error: {e}")

        status = response.status_code
        if 200 <= status < 300:
            return ValidationOutcome.valid(url, http_status=status)
        if 400 <= status < 500:
            logger.info(f"Sefaria has no text for {ref_path} (HTTP {status})")
            return ValidationOutcome.invalid(url, "not-found", http_status=status)

        logger.warning(f"Unexpected status {status} probing {url}")
        return ValidationOutcome.unreachable(url, f"http-{status}", http_status=status)
