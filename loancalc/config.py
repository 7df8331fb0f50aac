from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "LOANCALC_"}

    # App
    app_name: str = "Mortgage Calculator Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Optimizer: interest savings are discounted at this annual rate
    optimization_discount_rate: Decimal = Decimal("0.05")
    default_fee_percentage: Decimal = Decimal("0")

    # APR: percentage points of disagreement with the reference root before warning
    apr_discrepancy_threshold: Decimal = Decimal("0.05")


settings = Settings()
