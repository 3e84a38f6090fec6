from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Supplier Payout Console API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (SQLite via aiosqlite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./payout_console.db",
        alias="DATABASE_URL",
    )
    db_echo: bool = Field(default=False, alias="DB_ECHO")

    # Payout rules
    min_payout_amount: Decimal = Field(
        default=Decimal("0"), alias="MIN_PAYOUT_AMOUNT",
    )  # 0 disables the floor
    document_rates: dict[str, Decimal] = Field(
        default_factory=dict, alias="DOCUMENT_RATES",
    )  # JSON, e.g. {"gmail": "5", "outlook": "7"}

    # Submissions
    max_documents_per_submission: int = Field(
        default=500, alias="MAX_DOCUMENTS_PER_SUBMISSION",
    )

    # Query engine
    max_page_size: int = Field(default=200, alias="MAX_PAGE_SIZE")
    snapshot_ttl_seconds: int = Field(default=300, alias="SNAPSHOT_TTL_SECONDS")
    snapshot_max_entries: int = Field(default=256, alias="SNAPSHOT_MAX_ENTRIES")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @field_validator("document_rates")
    @classmethod
    def _normalise_kinds(cls, rates: dict[str, Decimal]) -> dict[str, Decimal]:
        # Document kinds are lowercased on submission
        return {kind.strip().lower(): rate for kind, rate in rates.items()}

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    def rate_for(self, kind: str) -> Decimal:
        """Amount credited per verified document of *kind* (0 when unpriced)."""
        return Decimal(self.document_rates.get(kind.strip().lower(), Decimal("0")))

settings = Settings()
