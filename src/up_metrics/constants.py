"""Network and protocol constants."""

from typing import TypedDict


class NetworkDefaults(TypedDict):
    chain_id: int
    rpc_url: str


BSC_MAINNET: NetworkDefaults = {
    "chain_id": 56,
    "rpc_url": "https://bsc-dataseed.binance.org/",
}

BSC_TESTNET: NetworkDefaults = {
    "chain_id": 97,
    "rpc_url": "https://data-seed-prebsc-2-s2.binance.org:8545/",
}

# Upper bound on calls per multicall request
MULTICALL_BATCH_SIZE = 20

# Price routes may chain at most this many edges
MAX_ROUTE_EDGES = 4

DISPLAY_DECIMALS = 8

DEFAULT_CACHE_TTL = 10  # seconds
DEFAULT_CACHE_CHECK_PERIOD = 600  # seconds

DEFAULT_REFERENCE_TOKEN = "up"

TOKEN_LIST_FILENAME = "tokenlist.json"
PROTOCOL_CONFIG_FILENAME = "config.json"

# Cache keys for the public metrics
TVL_CACHE_KEY = "getTVL"
PRICE_CACHE_KEY = "upPrice"
MARKET_CAP_CACHE_KEY = "marketCap"
