from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "local"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    ledger_database_url: str = "sqlite:///./registry_lock_ledger.db"
    registry_database_url: str = "sqlite:///./registry.db"

    verification_code_length: int = 32
    lock_expiry_minutes: int = 60
    unlock_expiry_minutes: int = 60

    server_status_change_cost: Decimal = Decimal("20.00")
    server_status_change_currency: str = "USD"
    tld_server_status_change_costs: dict[str, Decimal] = {}

    admin_emails: list[str] = []


settings = Settings()
