"""Cost data providers, one per external source."""

from typing import List, Optional

from cost_engine.configs import Settings, settings as default_settings

from .base import BaseCostProvider
from .benchmark import BenchmarkCostProvider
from .exchange import ExchangeRateEstimator
from .expatistan import ExpatistanCostProvider
from .numbeo import NumbeoCostProvider


def default_providers(config: Optional[Settings] = None) -> List[BaseCostProvider]:
    """Build the configured provider set, highest priority first."""
    config = config or default_settings
    return [
        NumbeoCostProvider(
            api_key=config.NUMBEO_API_KEY,
            api_url=config.NUMBEO_API_URL,
            min_interval_seconds=config.NUMBEO_MIN_INTERVAL_SECONDS,
            timeout=config.HTTP_TIMEOUT_SECONDS,
        ),
        ExpatistanCostProvider(
            base_url=config.EXPATISTAN_BASE_URL,
            min_interval_seconds=config.EXPATISTAN_MIN_INTERVAL_SECONDS,
            timeout=config.HTTP_TIMEOUT_SECONDS,
        ),
        BenchmarkCostProvider(),
        ExchangeRateEstimator(
            rates_url=config.EXCHANGE_RATE_API_URL,
            timeout=config.HTTP_TIMEOUT_SECONDS,
        ),
    ]


__all__ = [
    "BaseCostProvider",
    "BenchmarkCostProvider",
    "ExchangeRateEstimator",
    "ExpatistanCostProvider",
    "NumbeoCostProvider",
    "default_providers",
]
