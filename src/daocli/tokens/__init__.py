"""Deploying MiniMe tokens."""

from .tasks import (
    DEFAULT_DECIMAL_UNITS,
    DEFAULT_TOKEN_FACTORIES,
    MAINNET_MINIME_TOKEN_FACTORY,
    RINKEBY_MINIME_TOKEN_FACTORY,
    TokenContext,
    TokenDeployer,
    TokenOptions,
    default_factory_address,
)

__all__ = [
    "DEFAULT_DECIMAL_UNITS",
    "DEFAULT_TOKEN_FACTORIES",
    "MAINNET_MINIME_TOKEN_FACTORY",
    "RINKEBY_MINIME_TOKEN_FACTORY",
    "TokenContext",
    "TokenDeployer",
    "TokenOptions",
    "default_factory_address",
]
