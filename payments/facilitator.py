"""HTTP client for the x402 facilitator's verify and settle endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from config.config import FacilitatorCredential
from payments.auth import auth_headers
from utils.logger import get_logger

logger = get_logger(__name__)

X402_VERSION = 1


class FacilitatorError(Exception):
    """Raised when the facilitator cannot be reached or answers garbage."""


@dataclass(frozen=True)
class VerifyResult:
    is_valid: bool
    invalid_reason: str | None = None
    payer: str | None = None


@dataclass(frozen=True)
class SettleResult:
    success: bool
    error_reason: str | None = None
    transaction: str | None = None
    network: str | None = None
    payer: str | None = None


class FacilitatorClient:
    """
    Delegates proof verification and settlement to a remote facilitator.

    Both calls post the decoded payment payload together with the requirements
    the payer was shown.
    """

    def __init__(
        self,
        base_url: str,
        credential: FacilitatorCredential | None = None,
        timeout_s: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.credential = credential
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def verify(
        self, payment_payload: dict[str, Any], requirements: dict[str, Any]
    ) -> VerifyResult:
        data = await self._post("/verify", payment_payload, requirements)
        return VerifyResult(
            is_valid=bool(data.get("isValid")),
            invalid_reason=data.get("invalidReason"),
            payer=data.get("payer"),
        )

    async def settle(
        self, payment_payload: dict[str, Any], requirements: dict[str, Any]
    ) -> SettleResult:
        data = await self._post("/settle", payment_payload, requirements)
        return SettleResult(
            success=bool(data.get("success")),
            error_reason=data.get("errorReason"),
            transaction=data.get("transaction"),
            network=data.get("network"),
            payer=data.get("payer"),
        )

    async def _post(
        self, path: str, payment_payload: dict[str, Any], requirements: dict[str, Any]
    ) -> dict[str, Any]:
        body = {
            "x402Version": payment_payload.get("x402Version", X402_VERSION),
            "paymentPayload": payment_payload,
            "paymentRequirements": requirements,
        }
        try:
            response = await self._client.post(
                f"{self.base_url}{path}",
                json=body,
                headers=auth_headers(self.credential),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise FacilitatorError(
                f"Facilitator {path} returned {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise FacilitatorError(f"Facilitator {path} request failed: {e}") from e
        except ValueError as e:
            raise FacilitatorError(f"Facilitator {path} returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise FacilitatorError(f"Facilitator {path} returned an unexpected body")
        return data
