"""
Configuration management for the Shipping Gateway.
Handles loading provider settings from environment variables and .env files.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv


MELHOR_ENVIO_BASE_URI = "https://www.melhorenvio.com.br/api/v2/"
MELHOR_ENVIO_SANDBOX_BASE_URI = "https://sandbox.melhorenvio.com.br/api/v2/"
CORREIOS_BASE_URI = "https://api.correios.com.br/"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class MelhorEnvioConfig:
    """Melhor Envio provider settings."""

    token: str = ""
    base_uri: str = MELHOR_ENVIO_BASE_URI
    sandbox_base_uri: str = MELHOR_ENVIO_SANDBOX_BASE_URI
    use_sandbox: bool = False
    timeout: float = 10.0  # seconds

    # Wait before re-fetching the order; label generation is asynchronous
    order_lookup_delay: float = 3.0

    # Print and order re-fetch retries
    max_retry_attempts: int = 3
    retry_delay_seconds: float = 2.0

    @property
    def effective_base_uri(self) -> str:
        return self.sandbox_base_uri if self.use_sandbox else self.base_uri

    @classmethod
    def from_env(cls) -> "MelhorEnvioConfig":
        return cls(
            token=os.getenv("MELHOR_ENVIO_TOKEN", ""),
            base_uri=os.getenv("MELHOR_ENVIO_BASE_URI", MELHOR_ENVIO_BASE_URI),
            sandbox_base_uri=os.getenv(
                "MELHOR_ENVIO_SANDBOX_BASE_URI", MELHOR_ENVIO_SANDBOX_BASE_URI
            ),
            use_sandbox=_env_bool("MELHOR_ENVIO_USE_SANDBOX"),
            timeout=float(os.getenv("MELHOR_ENVIO_TIMEOUT", "10")),
            order_lookup_delay=float(os.getenv("MELHOR_ENVIO_ORDER_LOOKUP_DELAY", "3")),
            max_retry_attempts=int(os.getenv("MELHOR_ENVIO_MAX_RETRY_ATTEMPTS", "3")),
            retry_delay_seconds=float(os.getenv("MELHOR_ENVIO_RETRY_DELAY_SECONDS", "2")),
        )


@dataclass
class CorreiosConfig:
    """Correios provider settings."""

    token: str = ""
    base_uri: str = CORREIOS_BASE_URI
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "CorreiosConfig":
        return cls(
            token=os.getenv("CORREIOS_TOKEN", ""),
            base_uri=os.getenv("CORREIOS_BASE_URI", CORREIOS_BASE_URI),
            timeout=float(os.getenv("CORREIOS_TIMEOUT", "10")),
        )


@dataclass
class GatewayConfig:
    """Main configuration class for the Shipping Gateway."""

    default_driver: str = "melhor_envio"

    # === Providers ===
    melhor_envio: MelhorEnvioConfig = field(default_factory=MelhorEnvioConfig)
    correios: CorreiosConfig = field(default_factory=CorreiosConfig)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def providers(self) -> dict[str, object]:
        """Configured providers keyed by driver name."""
        return {
            "melhor_envio": self.melhor_envio,
            "correios": self.correios,
        }

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "GatewayConfig":
        """Load configuration from environment variables."""

        # Try to load from .env file
        if env_file:
            load_dotenv(env_file)
        else:
            # Try common locations
            for env_path in ["shipping.env", ".env"]:
                if Path(env_path).exists():
                    load_dotenv(env_path)
                    break

        return cls(
            default_driver=os.getenv("SHIPPING_DEFAULT_DRIVER", "melhor_envio"),
            melhor_envio=MelhorEnvioConfig.from_env(),
            correios=CorreiosConfig.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.default_driver not in self.providers:
            errors.append(f"Unknown SHIPPING_DEFAULT_DRIVER: {self.default_driver}")
        if not self.melhor_envio.token:
            errors.append("MELHOR_ENVIO_TOKEN is required for label issuance")
        if self.melhor_envio.max_retry_attempts < 1:
            errors.append("MELHOR_ENVIO_MAX_RETRY_ATTEMPTS must be at least 1")
        if self.melhor_envio.order_lookup_delay < 0:
            errors.append("MELHOR_ENVIO_ORDER_LOOKUP_DELAY cannot be negative")

        return errors


# Global config instance
_config: Optional[GatewayConfig] = None


def get_config() -> GatewayConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = GatewayConfig.from_env()
    return _config


def init_config(env_file: Optional[str] = None) -> GatewayConfig:
    """Initialize configuration from environment."""
    global _config
    _config = GatewayConfig.from_env(env_file)
    return _config
