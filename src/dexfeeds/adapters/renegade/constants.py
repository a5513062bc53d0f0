"""Renegade API constants."""

from dexfeeds.feeds.exceptions import FeedConfigurationError
from dexfeeds.networks import Network

DEX_KEY = "renegade"

# Base API URLs for each network
RENEGADE_ARBITRUM_BASE_URL = "https://arbitrum-one.auth-server.renegade.fi"
RENEGADE_BASE_BASE_URL = "https://base-mainnet.auth-server.renegade.fi"

RENEGADE_LEVELS_ENDPOINT = "/rfqt/v3/levels"

# Caching
RENEGADE_LEVELS_CACHE_TTL_SECONDS = 30
RENEGADE_LEVELS_POLLING_INTERVAL_SECONDS = 15.0
RENEGADE_LEVELS_CACHE_KEY = "renegade_levels"

RENEGADE_TOKEN_METADATA_CACHE_TTL_SECONDS = 3600
RENEGADE_TOKEN_METADATA_POLLING_INTERVAL_SECONDS = 24 * 60 * 60.0
RENEGADE_TOKEN_METADATA_CACHE_KEY = "renegade_token_metadata"
RENEGADE_TOKEN_MAPPINGS_BASE_URL = (
    "https://raw.githubusercontent.com/renegade-fi/token-mappings/main/"
)

# Authentication
RENEGADE_HEADER_PREFIX = "x-renegade"
RENEGADE_API_KEY_HEADER = "x-renegade-api-key"
RENEGADE_AUTH_HEADER = "x-renegade-auth"
RENEGADE_AUTH_EXPIRATION_HEADER = "x-renegade-auth-expiration"
REQUEST_SIGNATURE_DURATION_MS = 10 * 1000

# Per-network parameters
RENEGADE_NETWORKS = {
    Network.ARBITRUM: {
        "base_url": RENEGADE_ARBITRUM_BASE_URL,
        "chain_name": "arbitrum-one",
        "usdc_address": "0xaf88d065e77c8cc2239327c5edb3a432268e5831",
    },
    Network.BASE: {
        "base_url": RENEGADE_BASE_BASE_URL,
        "chain_name": "base-mainnet",
        "usdc_address": "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
    },
}


def network_params(network: int) -> dict[str, str]:
    """Parameters for network.

    Raises:
        FeedConfigurationError: If Renegade does not run on network
    """
    params = RENEGADE_NETWORKS.get(network)
    if params is None:
        raise FeedConfigurationError(f"Network {network} is not supported by Renegade")
    return params
