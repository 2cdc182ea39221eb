"""
Wonderful Payments API client.

Wire contract (all GET, all with `Authorization: Bearer <merchant key>`):

  /v2/ref                 payload fields as query params → {"ref": ...}
  /v2/woo/{paymentId}     → {"paymentReference", "wonderfulPaymentsId", "status", "selectedAspsp"}
  /v2/supported-banks     → {"data": [{"bank_id", "bank_name", "bank_logo", "status"}]}

TLS verification is on unless explicitly disabled in settings. Each call is
made once; failures are raised as ProviderError subclasses and only logged
here with the status code, never with the credential or the request body.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field, ValidationError

from wonderful_gateway.config import settings
from wonderful_gateway.engine.errors import (
    ConfigurationError,
    PaymentInitiationError,
    ProviderError,
    ProviderUnavailableError,
)
from wonderful_gateway.providers.base import Bank, PaymentProvider, ProviderPayment

logger = logging.getLogger("wonderful_gateway.provider")


class _RefBody(BaseModel):
    ref: str = Field(min_length=1)

    model_config = {"coerce_numbers_to_str": True}


class _PaymentBody(BaseModel):
    payment_reference: str = Field(alias="paymentReference", min_length=1)
    wonderful_payments_id: str = Field(alias="wonderfulPaymentsId")
    status: str
    selected_aspsp: Optional[str] = Field(default=None, alias="selectedAspsp")

    model_config = {"coerce_numbers_to_str": True}


class _BankBody(BaseModel):
    bank_id: str
    bank_name: str
    bank_logo: Optional[str] = None
    status: str

    model_config = {"coerce_numbers_to_str": True}


class _BanksBody(BaseModel):
    data: list[_BankBody]


class WonderfulPaymentsProvider(PaymentProvider):
    """Live provider backed by httpx."""

    def __init__(
        self,
        merchant_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        verify: Optional[bool] = None,
        timeout: Optional[float] = None,
        banks_cache_seconds: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._merchant_key = (
            merchant_key if merchant_key is not None else settings.merchant_key.get_secret_value()
        )
        self._endpoint = (endpoint or settings.api_endpoint).rstrip("/")
        self._verify = verify if verify is not None else settings.ssl_verify
        self._timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._banks_ttl = banks_cache_seconds if banks_cache_seconds is not None else settings.banks_cache_seconds
        self._http_client = http_client

        self._banks: Optional[list[Bank]] = None
        self._banks_fetched_at = 0.0

        if not self._verify:
            logger.warning("TLS verification is disabled for %s", self._endpoint)

    @property
    def name(self) -> str:
        return "wonderful"

    def _auth_headers(self) -> dict[str, str]:
        if not self._merchant_key:
            raise ConfigurationError("Wonderful Payments merchant key is not configured")
        return {
            "Authorization": f"Bearer {self._merchant_key}",
            "Accept": "application/json",
        }

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(verify=self._verify, timeout=self._timeout) as client:
            yield client

    async def _get_json(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        headers = self._auth_headers()
        url = f"{self._endpoint}{path}"

        try:
            async with self._client() as client:
                resp = await client.get(url, params=params, headers=headers)
        except httpx.RequestError as e:
            logger.error("Wonderful Payments unreachable: GET %s (%s)", path, e.__class__.__name__)
            raise ProviderUnavailableError(f"GET {path} failed: {e.__class__.__name__}") from e

        if not resp.is_success:
            logger.error("Wonderful Payments error: GET %s returned HTTP %d", path, resp.status_code)
            raise ProviderError(f"GET {path} returned HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            logger.error("Wonderful Payments error: GET %s returned a non-JSON body", path)
            raise ProviderError(f"GET {path} returned a non-JSON body", status_code=resp.status_code) from e

    async def create_reference(self, params: dict[str, str]) -> str:
        try:
            body = await self._get_json("/v2/ref", params=params)
            return _RefBody.model_validate(body).ref
        except ValidationError as e:
            logger.error("Wonderful Payments error: /v2/ref response has no usable ref")
            raise PaymentInitiationError("Response from /v2/ref has no ref") from e
        except ProviderError as e:
            raise PaymentInitiationError(str(e), status_code=e.status_code) from e

    async def get_payment(self, wonderful_payment_id: str) -> ProviderPayment:
        path = f"/v2/woo/{quote(wonderful_payment_id, safe='')}"
        body = await self._get_json(path)
        try:
            parsed = _PaymentBody.model_validate(body)
        except ValidationError as e:
            logger.error("Wonderful Payments error: %s response is missing payment fields", path)
            raise ProviderError(f"Malformed payment response from {path}") from e

        return ProviderPayment(
            payment_reference=parsed.payment_reference,
            wonderful_payments_id=parsed.wonderful_payments_id,
            status=parsed.status,
            selected_aspsp=parsed.selected_aspsp,
        )

    async def supported_banks(self) -> list[Bank]:
        if self._banks is not None and time.monotonic() - self._banks_fetched_at < self._banks_ttl:
            return self._banks

        body = await self._get_json("/v2/supported-banks")
        try:
            parsed = _BanksBody.model_validate(body)
        except ValidationError as e:
            logger.error("Wonderful Payments error: /v2/supported-banks response is malformed")
            raise ProviderError("Malformed response from /v2/supported-banks") from e

        self._banks = [
            Bank(bank_id=b.bank_id, bank_name=b.bank_name, bank_logo=b.bank_logo, status=b.status)
            for b in parsed.data
        ]
        self._banks_fetched_at = time.monotonic()
        return self._banks
