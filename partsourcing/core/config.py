from pydantic_settings import BaseSettings
from typing import Dict, Literal


class Settings(BaseSettings):
    """
    Application configuration settings.
    Loads from environment variables or .env file.
    """

    # Application
    APP_NAME: str = "PartSourcing API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database (only used by the mongo inventory adapter)
    DATABASE_URL: str = "mongodb://localhost:27017/partsourcing"

    # Adapters
    # - mock: In-memory sample data (development, tests)
    # - mongo / gemini: Real backing services
    INVENTORY_ADAPTER_TYPE: Literal["mock", "mongo"] = "mock"
    AI_ADAPTER_TYPE: Literal["mock", "gemini"] = "mock"

    # PartsTech marketplace
    PARTSTECH_USERNAME: str = ""
    PARTSTECH_PASSWORD: str = ""
    PARTSTECH_GRAPHQL_URL: str = "https://app.partstech.com/graphql"
    PARTSTECH_LOGIN_URL: str = "https://app.partstech.com/login"
    PARTSTECH_SESSION_TTL_HOURS: float = 24  # No server-side expiry is exposed
    PARTSTECH_REQUEST_TIMEOUT: float = 30.0
    PARTSTECH_HEADLESS: bool = True
    PARTSTECH_STEALTH: bool = False

    # Vendor roster: account id -> display name (JSON object in env)
    PARTSTECH_VENDOR_ACCOUNTS: Dict[str, str] = {
        "1": "PartsTech Catalog",
        "70468": "O'Reilly Auto Parts",
        "139607": "Vendor 2",
        "56978": "Vendor 3",
        "57020": "Vendor 4",
        "150404": "Vendor 5",
        "243873": "Vendor 6",
        "248963": "Vendor 7",
    }

    # Caller-facing failures slower than this are reported as TIMEOUT
    SEARCH_TIMEOUT_SECONDS: float = 60.0

    # Ranking
    PREFERRED_VENDOR: str = "O'Reilly"

    # Gemini (AI inventory matching, parts list drafting)
    GOOGLE_AI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Customer Portal
    PORTAL_BASE_URL: str = "http://localhost:3000"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
