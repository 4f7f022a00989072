"""UbusServiceRegistry: asks procd (via ubus) which services are running.

Equivalent to ``ubus call service list '{"name": "<service>"}'``; the reply
maps the service name to its metadata, including an ``instances`` object.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fanpanel.sources.base import ServiceRegistry

logger = logging.getLogger(__name__)


class ServiceQueryError(RuntimeError):
    """Raised when the registry cannot be queried."""


class UbusServiceRegistry(ServiceRegistry):
    def __init__(self, ubus_binary: str = "ubus", timeout: float = 5.0) -> None:
        self._binary = ubus_binary
        self._timeout = timeout

    async def query(self, service_name: str) -> dict[str, Any]:
        proc = await asyncio.create_subprocess_exec(
            self._binary, "call", "service", "list", json.dumps({"name": service_name}),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ServiceQueryError(f"ubus query for '{service_name}' timed out") from None

        if proc.returncode != 0:
            raise ServiceQueryError(
                f"ubus exited with {proc.returncode}: {err.decode(errors='replace').strip()}"
            )

        text = out.decode(errors="replace").strip()
        if not text:
            return {}
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ServiceQueryError(f"ubus returned invalid JSON: {exc}") from exc
        return data if isinstance(data, dict) else {}
