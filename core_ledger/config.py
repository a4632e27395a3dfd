"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class LedgerConfig(BaseSettings):
    """Ledger engine configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Business rules configuration
    require_limit_policy: bool = False  # True = every account needs a limit policy
    account_id_bytes: int = 16  # Random bytes per account id (hex-encoded)

    # Probe used to validate limit policies at registration
    limit_probe_amount: int = 100
    limit_probe_balance_before: int = 200
    limit_probe_balance_after: int = 100

    # Feature flags
    log_recoverable_errors: bool = True
    enable_domain_events: bool = True

    class Config:
        env_prefix = "LEDGER_"
        env_file = ".env"
        case_sensitive = False

    @property
    def limit_probe(self) -> tuple:
        """Canonical (amount, balance_before, balance_after) probe"""
        return (
            self.limit_probe_amount,
            self.limit_probe_balance_before,
            self.limit_probe_balance_after,
        )


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
