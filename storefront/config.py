"""Application configuration using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./db.sqlite3"

    # App Settings
    debug: bool = False
    log_level: str = "INFO"
    log_dir: str = "logs"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    site_name: str = "Shukarsh"
    # Digits only, used for wa.me order/contact links
    whatsapp_number: str = ""

    # Admin access (empty password = open admin panel)
    admin_password: str = ""
    admin_api_key: str = ""

    # Uploads
    uploads_dir: str = "uploads"
    upload_max_bytes: int = 10 * 1024 * 1024
    upload_allowed_extensions: list[str] = [".jpg", ".jpeg", ".png", ".gif", ".webp"]

    # ==========================================================================
    # Product Scraper Settings
    # ==========================================================================
    scrape_timeout_seconds: float = 15.0
    scrape_max_bytes: int = 2 * 1024 * 1024

    # ==========================================================================
    # Marketplace Bulk Import Settings
    # ==========================================================================
    marketplace_store_url: str = "https://www.meesho.com/ShuKarshEnterprises"
    marketplace_base_url: str = "https://www.meesho.com/"
    marketplace_timeout_seconds: float = 30.0
    marketplace_max_bytes: int = 5 * 1024 * 1024

    # ==========================================================================
    # Image Proxy / QR Settings
    # ==========================================================================
    image_proxy_timeout_seconds: float = 10.0
    image_proxy_max_bytes: int = 10 * 1024 * 1024
    image_proxy_allowed_hosts: list[str] = [
        "images.meesho.com",
        "m.media-amazon.com",
        "rukminim",
        "img.fkcdn",
    ]
    image_proxy_referer: str = "https://www.meesho.com/"
    qr_default_size: int = 256
    qr_max_size: int = 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
