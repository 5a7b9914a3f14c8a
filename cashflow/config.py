"""Configuration management for cashflow."""

from dataclasses import dataclass, field
from pathlib import Path

from cashflow.exceptions import ConfigurationError


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration.

    ``url`` wins over the individual fields when set (hosted databases
    hand out a single connection URL).
    """

    host: str = "localhost"
    port: int = 5432
    database: str = "cashflow"
    user: str = "postgres"
    password: str = "postgres"
    url: str | None = None

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        if self.url:
            return self.url
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class ReminderConfig:
    """Overdue reminder delivery configuration."""

    delay_seconds: float = 1.0  # pause between bulk messages (anti-spam)
    country_code: str = "55"
    template: str | None = None  # None -> built-in default template


@dataclass
class CompanyInfo:
    """Company header printed on receipts."""

    name: str = "SanLéo Soluções em Trânsito LTDA"
    trade_name: str = "SanLéo"
    cnpj: str = "12345678000190"
    address: str = "Rua das Flores, 123 - Centro - São Paulo/SP - CEP: 01234-567"
    phone: str = "(11) 3333-4444"
    email: str = "contato@sanleo.com.br"
    website: str = "www.sanleo.com.br"


@dataclass
class CashflowConfig:
    """Main configuration for cashflow."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)
    company: CompanyInfo = field(default_factory=CompanyInfo)
    catalog_path: Path = field(default_factory=lambda: Path("predefined_services.json"))
    log_level: str = "INFO"
    log_format: str = "standard"

    def __post_init__(self) -> None:
        if self.reminders.delay_seconds < 0:
            raise ConfigurationError(
                "Reminder delay must not be negative",
                detail=f"delay_seconds={self.reminders.delay_seconds}",
            )
        if self.log_format not in ("standard", "json"):
            raise ConfigurationError(
                "Unknown log format",
                detail=f"log_format={self.log_format!r}, expected 'standard' or 'json'",
            )

    @classmethod
    def from_env(cls) -> "CashflowConfig":
        """Create config from environment variables."""
        import os

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_int_env("POSTGRES_PORT", "5432"),
            database=os.getenv("POSTGRES_DB", "cashflow"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            url=os.getenv("DATABASE_URL") or None,
        )

        reminders = ReminderConfig(
            delay_seconds=_float_env("REMINDER_DELAY_SECONDS", "1.0"),
            country_code=os.getenv("WHATSAPP_COUNTRY_CODE", "55"),
            template=os.getenv("REMINDER_TEMPLATE") or None,
        )

        defaults = CompanyInfo()
        company = CompanyInfo(
            name=os.getenv("COMPANY_NAME", defaults.name),
            trade_name=os.getenv("COMPANY_TRADE_NAME", defaults.trade_name),
            cnpj=os.getenv("COMPANY_CNPJ", defaults.cnpj),
            address=os.getenv("COMPANY_ADDRESS", defaults.address),
            phone=os.getenv("COMPANY_PHONE", defaults.phone),
            email=os.getenv("COMPANY_EMAIL", defaults.email),
            website=os.getenv("COMPANY_WEBSITE", defaults.website),
        )

        return cls(
            postgres=postgres,
            reminders=reminders,
            company=company,
            catalog_path=Path(os.getenv("CATALOG_PATH", "predefined_services.json")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _int_env(name: str, default: str) -> int:
    import os

    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer", detail=f"got {raw!r}") from exc


def _float_env(name: str, default: str) -> float:
    import os

    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number", detail=f"got {raw!r}") from exc
