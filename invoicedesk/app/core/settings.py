import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    def __init__(self):
        self.app_name = "InvoiceDesk"
        self.api_version = "1.0.0"
        self.environment = os.getenv("APP_ENV", "development")
        self.secret_key = os.getenv("SECRET_KEY", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./invoicedesk.db")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
            if origin.strip()
        ]

        # Invoice defaults
        self.default_tax_rate = Decimal(os.getenv("TAX_RATE", "0.08"))
        self.default_currency = os.getenv("CURRENCY", "USD")
        self.default_payment_terms = int(os.getenv("PAYMENT_TERMS", 30))

        # Business profile injected into every rendered document
        self.business_name = os.getenv("BUSINESS_NAME", "Your Business Name")
        self.business_address = os.getenv("BUSINESS_ADDRESS", "Your Business Address")
        self.business_email = os.getenv("BUSINESS_EMAIL", "your-email@example.com")

        # PDF pipeline
        self.pdf_output_dir = os.getenv("PDF_OUTPUT_DIR", "generated-pdfs")
        self.pdf_render_timeout_ms = int(os.getenv("PDF_RENDER_TIMEOUT_MS", 30000))

        # Outbound mail; an empty host selects the console transport
        self.smtp_host = os.getenv("SMTP_HOST", "")
        self.smtp_port = int(os.getenv("SMTP_PORT", 587))
        self.smtp_username = os.getenv("SMTP_USERNAME", "")
        self.smtp_password = os.getenv("SMTP_PASSWORD", "")
        self.smtp_use_tls = _env_bool("SMTP_USE_TLS", True)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
