from .loader import load_config, get_config, reload_config, ConfigError
from .schema import AlphaInsightConfig, ExchangeConfig, InsightDefaultsConfig, LoggingConfig

__all__ = [
    "load_config",
    "get_config",
    "reload_config",
    "ConfigError",
    "AlphaInsightConfig",
    "ExchangeConfig",
    "InsightDefaultsConfig",
    "LoggingConfig",
]
