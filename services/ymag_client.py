# services/ymag_client.py
"""Client for the Ymag SQL "requeteur" endpoint of the school-information API."""

import json
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger


class YmagQueryError(Exception):
    """A query could not be executed or its answer could not be read."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class YmagClient:
    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Auth-Token": self.token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def execute_query(self, sql: str) -> List[Dict[str, Any]]:
        """
        Run one SQL statement and return its rows.

        The API answers either with a JSON array or with an object keyed by
        row number; both come back as a list of rows.
        """
        logger.debug("Executing query: {}", sql)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.base_url, headers=self._headers(), json={"sql": sql})
        except httpx.TimeoutException as e:
            raise YmagQueryError(f"Request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise YmagQueryError(f"Request failed: {e}") from e

        text = response.text
        if response.is_error:
            raise YmagQueryError(
                f"HTTP error! status: {response.status_code} - {text}",
                status_code=response.status_code,
                body=text,
            )

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise YmagQueryError(f"Invalid JSON in response: {text[:200]}", status_code=response.status_code, body=text) from e

        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return list(data.values())
        raise YmagQueryError(f"Unexpected response type: {type(data).__name__}", status_code=response.status_code, body=text)
