"""x402 pay-per-request support."""

from .facilitator import FacilitatorClient, FacilitatorError, SettleResult, VerifyResult
from .gate import PAYMENT_HEADER, PaymentGate, decode_payment_header

__all__ = [
    "FacilitatorClient",
    "FacilitatorError",
    "PAYMENT_HEADER",
    "PaymentGate",
    "SettleResult",
    "VerifyResult",
    "decode_payment_header",
]
