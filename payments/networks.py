"""Settlement networks and the USDC contract deployed on each."""

from dataclasses import dataclass

from config.config import ConfigError


@dataclass(frozen=True)
class Asset:
    address: str
    # EIP-712 domain of the token contract, needed by payers to sign transfers
    name: str
    version: str = "2"


_BASE_USDC = Asset(address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", name="USD Coin")
_BASE_SEPOLIA_USDC = Asset(address="0x036CbD53842c5426634e7929541eC2318f3dCF7e", name="USDC")

USDC_BY_NETWORK: dict[str, Asset] = {
    "base": _BASE_USDC,
    "eip155:8453": _BASE_USDC,
    "base-sepolia": _BASE_SEPOLIA_USDC,
    "eip155:84532": _BASE_SEPOLIA_USDC,
}


def resolve_asset(network: str, override: str | None = None) -> Asset:
    """
    Look up the USDC asset for a network identifier.

    Both short names ("base") and chain-qualified identifiers ("eip155:8453")
    are accepted. ``override`` replaces the contract address.

    Raises:
        ConfigError: If the network is unknown and no override is given
    """
    known = USDC_BY_NETWORK.get(network.strip().lower())
    if override:
        return Asset(
            address=override,
            name=known.name if known else "USDC",
            version=known.version if known else "2",
        )
    if known is None:
        raise ConfigError(
            f"Unknown payment network '{network}'. Set PAYMENT_ASSET or use one of: "
            f"{', '.join(sorted(USDC_BY_NETWORK))}"
        )
    return known
