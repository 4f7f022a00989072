"""ReleaseChecker: asks the release server for the latest published tag.

One GET per operator request.  Failures are reported, never retried
automatically; the operator can simply ask again.
"""

from __future__ import annotations

import logging

import httpx

from fanpanel.models.actions import ReleaseInfo

logger = logging.getLogger(__name__)


class ReleaseCheckError(RuntimeError):
    """Raised when the latest release cannot be determined.

    ``reason`` is "network" (unreachable, HTTP error) or "parse"
    (reachable, but no usable tag in the payload).
    """

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class ReleaseChecker:
    def __init__(
        self,
        url: str,
        installed_version: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._installed = installed_version
        self._timeout = timeout
        self._transport = transport

    async def latest(self) -> ReleaseInfo:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(
                    self._url, headers={"Accept": "application/vnd.github+json"},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Release check failed: %s", exc)
            raise ReleaseCheckError("network", "Network error. Cannot reach the release server.") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise ReleaseCheckError("parse", "Could not parse latest release data.") from exc

        tag = None
        if isinstance(data, dict):
            tag = data.get("tag_name") or data.get("name")
        if not isinstance(tag, str) or not tag.strip():
            raise ReleaseCheckError("parse", "Could not parse latest release data.")

        tag = tag.strip()
        logger.info("Latest release: %s (installed %s)", tag, self._installed)
        return ReleaseInfo(
            tag=tag,
            installed=self._installed,
            update_available=_normalize(tag) != _normalize(self._installed),
        )


def _normalize(version: str) -> str:
    return version.strip().lower().lstrip("v")
