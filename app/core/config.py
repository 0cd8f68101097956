from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "PolyMesh Kenya"
    environment: str = "dev"
    log_level: str = "INFO"

    # ─────────── API ───────────
    api_prefix: str = "/api"
    request_id_header: str = "X-Request-Id"
    cors_origins: List[str] = [
        "http://localhost:8080",
        "http://127.0.0.1:5500",
        "https://Keith-kat.github.io",
    ]

    # ─────────── DATABASE ───────────
    database_url: str

    # ─────────── JWT / AUTH ───────────
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_access_token_minutes: int = 60

    # ─────────── RATE LIMIT ───────────
    # 200 requests per 15 minutes per client
    rate_limit_capacity: int = 200
    rate_limit_window_seconds: int = 900

    # ─────────── QUOTES ───────────
    quote_validity_days: int = 7

    # ─────────── M-PESA (Daraja) ───────────
    mpesa_base_url: str = "https://sandbox.safaricom.co.ke"
    mpesa_consumer_key: str = ""
    mpesa_consumer_secret: str = ""
    mpesa_shortcode: str = "174379"
    mpesa_passkey: str = ""
    mpesa_callback_url: str = "https://polyhomes-expert.onrender.com/api/mpesa-callback"
    mpesa_timeout_seconds: float = 5.0
    mpesa_transaction_desc: str = "Mosquito Mesh Payment"

    # ─────────── SMS (Africa's Talking) ───────────
    at_username: str = "sandbox"
    at_api_key: str = ""
    at_base_url: str = "https://api.sandbox.africastalking.com"
    at_timeout_seconds: float = 5.0
    sms_brand: str = "PolyMesh Kenya"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
