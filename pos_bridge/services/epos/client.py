# pos_bridge/services/epos/client.py

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from pos_bridge.core.config import Settings
from pos_bridge.core.enums import ResponseOutcome, SyncDirection
from pos_bridge.core.exceptions import (
    ConfigurationError,
    RemoteRejected,
    TransportFailure,
    UnparsableResponse,
)
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.sync_log import SyncAttempt, SyncLog

logger = logging.getLogger(__name__)

SUCCESS_CODES = (200, 201)


@dataclass
class EposResponse:
    """
    Result of one request to the POS.

    `body` holds the parsed JSON whenever the response could be parsed, also
    for rejected requests, so callers can inspect the error payload. Use `data`
    to get the body only when the request succeeded.
    """
    outcome: ResponseOutcome
    status_code: Optional[int] = None
    body: Any = None
    text: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == ResponseOutcome.OK

    @property
    def data(self) -> Any:
        return self.body if self.ok else None

    def get(self, key: str, default=None):
        """Field of a successful object response"""
        if self.ok and isinstance(self.body, dict):
            return self.body.get(key, default)
        return default

    def raise_for_status(self) -> "EposResponse":
        if self.outcome == ResponseOutcome.TRANSPORT_FAILED:
            raise TransportFailure(self.text or "Request to ePOS Now failed")
        if self.outcome == ResponseOutcome.UNPARSABLE:
            raise UnparsableResponse(f"Failed to JSON parse response: {self.text}")
        if self.outcome == ResponseOutcome.REJECTED:
            raise RemoteRejected(
                f"ePOS Now rejected the request with status {self.status_code}",
                status_code=self.status_code,
                body=self.body
            )
        return self


class EposClient:
    """
    Asynchronous client for the ePOS Now REST API (V2).

    Every request carries the pre-shared token as a Basic credential and a JSON
    body (an empty object when there is nothing to send, whatever the method).
    Requests are single attempts with a bounded timeout; nothing is retried
    here. Every attempt is written to the sync log.

    Documentation: https://developer.eposnowhq.com/
    """

    TRANSACTION = "Transaction/"
    COMPLETE_TRANSACTION = "CompleteTransaction/"
    CUSTOMER = "Customer/"
    CUSTOMER_ADDRESS = "CustomerAddress/"
    PRODUCT_STOCK = "ProductStock/"

    def __init__(
        self,
        token: str,
        sync_log: SyncLog,
        base_url: str = "https://api.eposnowhq.com/api/V2/",
        timeout: float = 30.0
    ):
        if not token:
            raise ConfigurationError("ePOS Now API token is not configured")
        self._token = token
        self.sync_log = sync_log
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Basic {self._token}",
            "Content-Type": "application/json",
        }

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint.lstrip('/')}"

    async def send(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None) -> EposResponse:
        """
        Make a request to the ePOS Now API

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: Resource path relative to the API base URL
            data: Request payload, sent for every method

        Returns:
            EposResponse: Classified outcome with the parsed body when available
        """
        method = method.upper()
        url = self.url_for(endpoint)
        attempt = SyncAttempt(method=method, endpoint=url, request_body=data)

        self.sync_log.outgoing(f"Requesting {{{method}}} {url}" + (" with params:" if data else ""))
        if data:
            self.sync_log.outgoing(json.dumps(data, indent=4, default=str))

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    content=json.dumps(data or {}, default=str)
                )
        except httpx.HTTPError as e:
            logger.error(f"ePOS Now {method} {url} failed: {str(e)}")
            attempt.outcome = ResponseOutcome.TRANSPORT_FAILED
            attempt.error = str(e)
            self.sync_log.record(attempt)
            return EposResponse(outcome=ResponseOutcome.TRANSPORT_FAILED, text=str(e))

        attempt.status_code = response.status_code
        self.sync_log.record(attempt)

        try:
            body = response.json()
        except ValueError:
            logger.warning(f"ePOS Now {method} {url} returned a non-JSON body (status {response.status_code})")
            attempt.outcome = ResponseOutcome.UNPARSABLE
            attempt.response_body = response.text
            self.sync_log.outgoing(f"Failed to JSON parse response: {response.text}")
            return EposResponse(
                outcome=ResponseOutcome.UNPARSABLE,
                status_code=response.status_code,
                text=response.text
            )

        if response.status_code not in SUCCESS_CODES:
            logger.warning(f"ePOS Now {method} {url} rejected with status {response.status_code}")
            attempt.outcome = ResponseOutcome.REJECTED
            attempt.response_body = body
            self.sync_log.outgoing(f"ERR: {json.dumps(body, indent=4)}")
            return EposResponse(
                outcome=ResponseOutcome.REJECTED,
                status_code=response.status_code,
                body=body,
                text=response.text
            )

        attempt.outcome = ResponseOutcome.OK
        return EposResponse(outcome=ResponseOutcome.OK, status_code=response.status_code, body=body)

    # Customer operations

    async def get_customer(self, customer_id) -> EposResponse:
        return await self.send("GET", f"{self.CUSTOMER}{customer_id}")

    async def create_customer(self, customer_data: Dict) -> EposResponse:
        return await self.send("POST", self.CUSTOMER, customer_data)

    async def update_customer(self, customer_id, customer_data: Dict) -> EposResponse:
        return await self.send("PUT", f"{self.CUSTOMER}{customer_id}", customer_data)

    async def delete_customer(self, customer_id) -> EposResponse:
        return await self.send("DELETE", f"{self.CUSTOMER}{customer_id}")

    async def create_customer_address(self, address_data: Dict) -> EposResponse:
        return await self.send("POST", self.CUSTOMER_ADDRESS, address_data)

    # Transaction operations

    async def create_complete_transaction(self, transaction_data: Dict) -> EposResponse:
        return await self.send("POST", self.COMPLETE_TRANSACTION, transaction_data)

    async def update_transaction(self, transaction_id, transaction_data: Dict) -> EposResponse:
        return await self.send("PUT", f"{self.TRANSACTION}{transaction_id}", transaction_data)

    # Stock operations

    async def get_stock_page(self, page: int = 0) -> EposResponse:
        """The first page is requested without a page parameter"""
        endpoint = self.PRODUCT_STOCK + (f"?page={page}" if page else "")
        return await self.send("GET", endpoint)


async def create_epos_client(store: EntityStore, settings: Settings, sync_log: SyncLog) -> EposClient:
    """Build a client with the token read once from the configuration store."""
    token = await store.get_config_value(settings.EPOS_TOKEN_CONFIG_KEY)
    if not token:
        token = settings.EPOS_API_TOKEN
    if not token:
        raise ConfigurationError(
            f"No ePOS Now token found under config key '{settings.EPOS_TOKEN_CONFIG_KEY}' "
            "and EPOS_API_TOKEN is not set"
        )
    return EposClient(
        token=token,
        sync_log=sync_log,
        base_url=settings.EPOS_API_BASE_URL,
        timeout=settings.EPOS_REQUEST_TIMEOUT
    )
