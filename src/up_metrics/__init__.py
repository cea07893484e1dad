"""TVL, price and market cap metrics for the UP protocol."""

from .client import MetricsClient
from .settings import MetricsSettings, Network

__version__ = "0.1.0"

__all__ = ["MetricsClient", "MetricsSettings", "Network", "__version__"]
