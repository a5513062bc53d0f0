"""Native API constants."""

from dexfeeds.networks import Network

DEX_KEY = "native"

NATIVE_API_URL = "https://v2.api.native.org/swap-api-v2/v1"
NATIVE_ORDERBOOK_ENDPOINT = "/orderbook"
NATIVE_BLACKLIST_ENDPOINT = "/blacklist"
NATIVE_API_KEY_HEADER = "apiKey"

NATIVE_ORDERBOOK_POLLING_INTERVAL_SECONDS = 1.0
NATIVE_ORDERBOOK_CACHE_TTL_SECONDS = 5
NATIVE_ORDERBOOK_CACHE_KEY = "native_orderbook"
NATIVE_BLACKLIST_POLLING_INTERVAL_SECONDS = 60.0

# Chain names as the orderbook endpoint expects them
NATIVE_CHAIN_NAMES = {
    Network.MAINNET: "ethereum",
    Network.BSC: "bsc",
    Network.POLYGON: "polygon",
    Network.ARBITRUM: "arbitrum",
    Network.BASE: "base",
}
