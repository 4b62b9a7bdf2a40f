"""Input normalization."""

from .config_resolver import DEFAULT_DISTRIBUTION_CONFIG, resolve_distribution_config
from .request import normalize_request

__all__ = ["DEFAULT_DISTRIBUTION_CONFIG", "normalize_request", "resolve_distribution_config"]
