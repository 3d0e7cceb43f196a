from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Review API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./loan_review.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    upload_dir: str = "./uploads"

    # Decisioning
    default_interest_rate: Decimal = Decimal("8.50")
    min_interest_rate: Decimal = Decimal("5.00")
    fallback_interest_rate: Decimal = Decimal("10.00")
    eligibility_min_score: int = 400
    eligibility_max_amount: Decimal = Decimal("50000")
    max_term_months: int = 360
    max_loan_amount: Decimal = Decimal("1000000000")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
