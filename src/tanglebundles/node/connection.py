"""
tanglebundles/node/connection.py

Low-level HTTP connection handling for a node's JSON command API.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import API_VERSION, REQUEST_TIMEOUT
from ..errors import NodeError

logger = logging.getLogger("tanglebundles.node.connection")


class NodeConnection:
    """
    Sends JSON commands to a node over HTTP.

    Every command is a POST of {"command": ..., **params} to the node URL.
    The underlying aiohttp session is opened on first use.
    """

    def __init__(
        self,
        url: str,
        api_version: str = API_VERSION,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize connection parameters.

        Args:
            url: Node HTTP API endpoint
            api_version: Value for the X-IOTA-API-Version header
            timeout: Total request timeout in seconds
            session: Existing session to use instead of opening one
        """
        self.url = url
        self.api_version = api_version
        self.timeout = timeout

        self._session = session
        self._owns_session = session is None

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-IOTA-API-Version": self.api_version,
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def send(self, command: str, **params: Any) -> Dict[str, Any]:
        """
        Send a command and return the decoded response body.

        Args:
            command: API command name, e.g. "findTransactions"
            **params: Command parameters

        Returns:
            Response body

        Raises:
            NodeError: On transport failure, non-200 status or error body
        """
        payload = {"command": command, **params}
        session = self._get_session()

        logger.debug(f"Sending {command} to {self.url}")

        try:
            async with session.post(self.url, json=payload, headers=self.headers) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    logger.error(f"Invalid JSON response to {command}: {e}")
                    raise NodeError(f"Invalid JSON response to {command}") from e

                if response.status != 200:
                    raise NodeError(
                        f"{command} failed with status {response.status}: "
                        f"{_error_message(body)}"
                    )

        except aiohttp.ClientError as e:
            logger.warning(f"Request to {self.url} failed: {e}")
            raise NodeError(f"{command} request failed: {e}") from e
        except asyncio.TimeoutError as e:
            logger.warning(f"Request to {self.url} timed out")
            raise NodeError(f"{command} request timed out") from e

        if not isinstance(body, dict):
            raise NodeError(f"Unexpected response to {command}: {body!r}")
        if body.get("error") or body.get("exception"):
            raise NodeError(f"Node error: {_error_message(body)}")

        return body

    async def close(self) -> None:
        """Close the session if this connection opened it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "NodeConnection":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        return str(body.get("error") or body.get("exception") or body)
    return str(body)
