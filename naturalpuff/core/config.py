from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env at the project root: naturalpuff/core/config.py -> naturalpuff/core -> naturalpuff -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"


class Settings(BaseSettings):
    secret_key: str = "change-me-in-production"
    database_url: str = "sqlite:///./naturalpuff.db"
    # CORS: comma separated origin list; in production https://naturalpuff.in
    cors_origins: str = "*"
    # Requests per minute per IP
    rate_limit_per_minute: int = 60
    rate_limit_register_per_minute: int = 3
    rate_limit_login_per_minute: int = 5
    rate_limit_payment_per_minute: int = 20
    admin_secret: str = ""             # X-Admin-Secret for /admin
    environment: str = "development"
    debug_mode: bool = False
    # Razorpay: keys only from the environment, never hard-coded
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_webhook_secret: str = ""
    razorpay_api_base: str = "https://api.razorpay.com/v1"
    razorpay_currency: str = "INR"
    # SMTP (order notifications). Gmail: smtp.gmail.com, 465 + SSL
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    smtp_from_name: str = "Natural Puff"
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    admin_email: str = ""              # Order notifications; empty -> smtp_user
    # Shiprocket
    shiprocket_email: str = ""
    shiprocket_password: str = ""
    shiprocket_api_base: str = "https://apiv2.shiprocket.in/v1/external"
    shiprocket_pickup_pincode: str = ""
    shiprocket_pickup_location: str = "Primary"
    # Catalog
    price_tenfold_correction: bool = True   # Legacy rows stored 10x (2940 -> 294)
    low_stock_threshold: int = 10
    flat_shipping_cost: int = 0        # Rupees; 0 = client must pick a courier rate

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("razorpay_key_id", "razorpay_key_secret", "razorpay_webhook_secret", mode="before")
    @classmethod
    def strip_keys(cls, v: str | None) -> str:
        """Copy/paste whitespace around keys breaks Basic auth and HMAC."""
        return (v or "").strip()


settings = Settings()


def is_razorpay_configured() -> bool:
    return bool(settings.razorpay_key_id and settings.razorpay_key_secret)


def is_shiprocket_configured() -> bool:
    return bool((settings.shiprocket_email or "").strip() and (settings.shiprocket_password or "").strip())


def is_mail_configured() -> bool:
    """SMTP host and sender credentials present?"""
    return bool((settings.smtp_host or "").strip() and (settings.smtp_user or "").strip())
