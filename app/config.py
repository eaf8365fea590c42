from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"

DEFAULT_JWT_SECRET = "employee-records-dev-secret-key-change-me-min-32-chars"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # =================================================================
    # JWT SETTINGS
    # =================================================================
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ISSUER: str = "EmployeeRecords.API"
    JWT_AUDIENCE: str = "EmployeeRecords.API.Users"
    JWT_EXPIRATION_MINUTES: int = 60
    JWT_CLOCK_SKEW_SECONDS: int = 30

    # =================================================================
    # AUDIT SETTINGS
    # =================================================================
    AUDIT_LOG_REQUEST_BODY: bool = True
    AUDIT_LOG_RESPONSE_BODY: bool = False
    AUDIT_LOG_HEADERS: bool = True
    AUDIT_SENSITIVE_HEADERS: list[str] = ["Authorization", "Cookie", "Set-Cookie", "X-API-Key"]
    AUDIT_EXCLUDED_PATHS: list[str] = ["/healthz", "/readyz", "/docs", "/openapi.json"]
    AUDIT_MAX_BODY_LOG_SIZE: int = 4096  # 4KB

    # =================================================================
    # RECORD STORE SETTINGS
    # =================================================================
    USER_CACHE_TTL_SECONDS: float = 300.0  # 5 minutes
    SEED_SAMPLE_DATA: bool = True

    # CORS is only enabled in development
    CORS_ALLOWED_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def get_jwt_config(self) -> dict:
        """
        Get JWT signing/verification configuration.

        The fallback secret is only acceptable outside production.
        """
        if self.environment == "production" and self.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set in production")

        return {
            "secret_key": self.JWT_SECRET_KEY,
            "issuer": self.JWT_ISSUER,
            "audience": self.JWT_AUDIENCE,
            "expiration_minutes": self.JWT_EXPIRATION_MINUTES,
            "leeway": self.JWT_CLOCK_SKEW_SECONDS,
        }

    def get_audit_config(self) -> dict:
        """Get audit middleware configuration."""
        return {
            "log_request_body": self.AUDIT_LOG_REQUEST_BODY,
            "log_response_body": self.AUDIT_LOG_RESPONSE_BODY,
            "log_headers": self.AUDIT_LOG_HEADERS,
            "sensitive_headers": {h.lower() for h in self.AUDIT_SENSITIVE_HEADERS},
            "excluded_paths": list(self.AUDIT_EXCLUDED_PATHS),
            "max_body_log_size": self.AUDIT_MAX_BODY_LOG_SIZE,
        }


settings = Settings()
