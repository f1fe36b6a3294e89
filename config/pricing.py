"""
Route pricing configuration.
Prices are USD amounts settled in USDC, which has 6 decimals on every
supported network.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

USDC_DECIMALS = 6


@dataclass(frozen=True)
class RoutePrice:
    """Price and payer-facing description of one gated route."""

    path: str
    price: str
    description: str
    env_var: str = ""

    def atomic_amount(self) -> str:
        """
        Convert the dollar price into atomic USDC units.

        Returns:
            Integer amount as a string, e.g. "$0.001" -> "1000"

        Raises:
            ValueError: If the price is not a non-negative decimal
        """
        raw = self.price.strip().lstrip("$").strip()
        try:
            amount = Decimal(raw)
        except InvalidOperation as e:
            raise ValueError(f"Invalid price '{self.price}' for {self.path}") from e

        if amount < 0 or not amount.is_finite():
            raise ValueError(f"Invalid price '{self.price}' for {self.path}")

        return str(int(amount.scaleb(USDC_DECIMALS)))


DEFAULT_ROUTE_PRICES: tuple[RoutePrice, ...] = (
    RoutePrice(
        path="/api/search",
        price="$0.001",
        description="Web search",
        env_var="PRICE_SEARCH",
    ),
    RoutePrice(
        path="/api/fetch",
        price="$0.002",
        description="URL content extraction",
        env_var="PRICE_FETCH",
    ),
    RoutePrice(
        path="/api/analyze-github",
        price="$0.005",
        description="GitHub repository analysis",
        env_var="PRICE_ANALYZE_GITHUB",
    ),
)
