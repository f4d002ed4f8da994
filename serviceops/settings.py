from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SERVICEOPS_", extra="ignore")

    db_url: str = "mysql+pymysql://serviceops:serviceops@db:3306/serviceops"

    log_level: str = "INFO"
    log_json: bool = False
    # Echo SQL statements through the sqlalchemy.engine logger
    log_sql: bool = False

    web_host: str = "127.0.0.1"
    web_port: int = 8000

    # Fraction, e.g. 0.0825 for 8.25%. Used when a client has no rate of its own.
    default_tax_rate: Decimal = Decimal("0")

    invoice_number_prefix: str = "US"
    qb_item_label: str = "Monthly Cleaning"
    qb_memo_label: str = "Cleaning Services"

    # How many months back the preview compares against (0 disables the delta)
    history_depth: int = 1


settings = Settings()
