"""
x402 payment gate middleware.

Gated requests move through
RECEIVED -> VERIFYING -> AUTHORIZED | REJECTED -> HANDLER_RUN -> SETTLING -> SETTLED | SETTLE_FAILED.
A rejected request never reaches its route handler, so unpaid requests make
no upstream calls. Settlement runs after the response has been sent and its
outcome is only logged.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.background import BackgroundTask

from config.config import Settings
from config.pricing import RoutePrice
from payments.facilitator import X402_VERSION, FacilitatorClient, FacilitatorError, SettleResult
from payments.networks import resolve_asset
from utils.logger import get_logger

logger = get_logger(__name__)

PAYMENT_HEADER = "X-PAYMENT"
PAYMENT_SCHEME = "exact"


class InvalidPaymentHeader(ValueError):
    """Raised when the payment header is not base64-encoded JSON."""


def decode_payment_header(header: str) -> dict[str, Any]:
    """Decode the opaque payment proof so it can be forwarded to the facilitator."""
    try:
        payload = json.loads(base64.b64decode(header.strip(), validate=True))
    except (binascii.Error, ValueError) as e:
        raise InvalidPaymentHeader("Invalid or malformed payment header") from e
    if not isinstance(payload, dict):
        raise InvalidPaymentHeader("Invalid or malformed payment header")
    return payload


class PaymentGate:
    """
    Middleware requiring a verified payment proof on priced GET routes.

    Only paths present in the route price table are gated; everything else,
    including ``/``, passes straight through.
    """

    def __init__(self, settings: Settings, facilitator: FacilitatorClient):
        self.payment = settings.payment
        self.settings = settings
        self.asset = resolve_asset(self.payment.network, self.payment.asset)
        self.facilitator = facilitator
        logger.info(
            "Payment gate initialized",
            extra={
                "extra_fields": {
                    "network": self.payment.network,
                    "facilitator_url": self.payment.facilitator_url,
                    "routes": sorted(route.path for route in settings.route_prices),
                }
            },
        )

    def requirements_for(self, route: RoutePrice, resource: str) -> dict[str, Any]:
        """Payment requirements advertised to the payer for ``route``."""
        return {
            "scheme": PAYMENT_SCHEME,
            "network": self.payment.network,
            "maxAmountRequired": route.atomic_amount(),
            "resource": resource,
            "description": route.description,
            "mimeType": "application/json",
            "payTo": self.payment.pay_to,
            "maxTimeoutSeconds": self.payment.max_timeout_seconds,
            "asset": self.asset.address,
            "extra": {"name": self.asset.name, "version": self.asset.version},
        }

    async def __call__(self, request: Request, call_next):
        route = self.settings.price_for(request.url.path) if request.method == "GET" else None
        if route is None:
            return await call_next(request)

        requirements = self.requirements_for(route, str(request.url.replace(query="")))

        header = request.headers.get(PAYMENT_HEADER)
        if not header:
            return self._reject(f"{PAYMENT_HEADER} header is required", requirements)

        try:
            payload = decode_payment_header(header)
        except InvalidPaymentHeader as e:
            return self._reject(str(e), requirements)

        try:
            verification = await self.facilitator.verify(payload, requirements)
        except FacilitatorError as e:
            logger.error(
                "Payment verification failed",
                extra={"extra_fields": {"path": route.path, "error": str(e)}},
            )
            return self._reject(str(e), requirements)

        if not verification.is_valid:
            logger.info(
                "Payment rejected",
                extra={
                    "extra_fields": {
                        "path": route.path,
                        "reason": verification.invalid_reason,
                        "payer": verification.payer,
                    }
                },
            )
            return self._reject(verification.invalid_reason or "Invalid payment", requirements)

        response = await call_next(request)
        if response.status_code >= 400:
            logger.info(
                "Handler failed, payment left unsettled",
                extra={"extra_fields": {"path": route.path, "status_code": response.status_code}},
            )
            return response

        previous = response.background

        async def settle_after_response():
            if previous is not None:
                await previous()
            await self.settle(payload, requirements, route.path, verification.payer)

        response.background = BackgroundTask(settle_after_response)
        return response

    async def settle(
        self,
        payload: dict[str, Any],
        requirements: dict[str, Any],
        path: str,
        payer: str | None = None,
    ) -> SettleResult | None:
        """
        Settle a verified payment. Never raises: the response is already sent.

        Returns:
            The settlement result, or None if the facilitator call failed
        """
        context = {
            "path": path,
            "payer": payer,
            "amount": requirements.get("maxAmountRequired"),
            "network": requirements.get("network"),
        }
        try:
            result = await self.facilitator.settle(payload, requirements)
        except Exception as e:
            logger.error(
                "Payment settlement failed",
                exc_info=True,
                extra={"extra_fields": {**context, "error": str(e)}},
            )
            return None

        if result.success:
            logger.info(
                "Payment settled",
                extra={"extra_fields": {**context, "transaction": result.transaction}},
            )
        else:
            logger.error(
                "Payment settlement rejected",
                extra={"extra_fields": {**context, "reason": result.error_reason}},
            )
        return result

    @staticmethod
    def _reject(reason: str, requirements: dict[str, Any]) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            content={"x402Version": X402_VERSION, "error": reason, "accepts": [requirements]},
        )
