"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Ledger (Cosmos SDK REST / LCD endpoint)
    ledger_rest_url: str = "https://lcd.osmosis.zone"
    explorer_tx_url: str = "https://www.mintscan.io/osmosis/txs"

    # Chain conventions
    address_prefix: str = "osmo"
    fee_denom: str = "uosmo"
    block_time_seconds: int = 5  # Approximate, used to derive timestamps from height

    # Export
    exchange_name: str = "Osmosis"
    export_filename_prefix: str = "osmosis-transactions"

    # Service
    service_name: str = "osmosis-tax-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0
    default_page_size: int = 100


settings = Settings()
