# =============================================================================
# core/config.py  —  Process-Wide Configuration
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads the environment ONCE at startup and freezes the result into an
#   AppConfig.  The config object is handed to each adapter when it is
#   constructed; no other module reads os.environ.
#
# ENVIRONMENT VARIABLES:
#   STELLAR_NETWORK    "testnet" (default) or "mainnet"
#   SOROSWAP_API_KEY   optional bearer token for the swap-data API
#   SOROSWAP_API_URL   optional override of the swap-data API base URL
#   DEFINDEX_API_KEY   optional bearer token for the vault-data API
#
#   Missing API keys are not an error: requests go out unauthenticated and,
#   if the backend refuses them, the adapters fall back to mock data.
# =============================================================================

from dataclasses import dataclass
from typing import Literal, Mapping, Optional
import os

Network = Literal["testnet", "mainnet"]

NETWORKS: tuple[str, ...] = ("testnet", "mainnet")

DEFAULT_SOROSWAP_API_URL = "https://api.soroswap.finance"
DEFAULT_DEFINDEX_API_URL = "https://api.defindex.io"

_HORIZON_URLS: dict[str, str] = {
    "testnet": "https://horizon-testnet.stellar.org",
    "mainnet": "https://horizon.stellar.org",
}

# Every outbound call is bounded by this timeout (seconds).
REQUEST_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class AppConfig:
    """Immutable configuration shared by every adapter."""

    network: Network = "testnet"
    soroswap_api_key: Optional[str] = None
    soroswap_api_url: str = DEFAULT_SOROSWAP_API_URL
    defindex_api_key: Optional[str] = None
    defindex_api_url: str = DEFAULT_DEFINDEX_API_URL
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.network not in NETWORKS:
            raise ValueError(
                f"Unsupported network {self.network!r}; expected one of {', '.join(NETWORKS)}"
            )

    @property
    def horizon_url(self) -> str:
        """Ledger (Horizon) endpoint for the selected network."""
        return _HORIZON_URLS[self.network]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build the config from environment variables.

        Args:
            environ: Mapping to read from; defaults to os.environ.

        Returns:
            A frozen AppConfig.

        Raises:
            ValueError: if STELLAR_NETWORK names an unknown network.
        """
        env = os.environ if environ is None else environ
        network = (env.get("STELLAR_NETWORK") or "testnet").strip().lower()
        return cls(
            network=network,  # type: ignore[arg-type]
            soroswap_api_key=env.get("SOROSWAP_API_KEY") or None,
            soroswap_api_url=env.get("SOROSWAP_API_URL") or DEFAULT_SOROSWAP_API_URL,
            defindex_api_key=env.get("DEFINDEX_API_KEY") or None,
        )
