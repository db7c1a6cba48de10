"""
Application settings.
Secrets can be loaded from AWS Secrets Manager at startup.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # AWS
    AWS_REGION: str = "us-east-1"
    COGNITO_REGION: str = "us-east-1"

    # Database. DATABASE_URL wins over the individual parts (e.g. sqlite in tests).
    DATABASE_URL: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: int = 5432
    DB_NAME: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASS: Optional[str] = None

    # Cognito
    COGNITO_USER_POOL_ID: Optional[str] = None
    COGNITO_CLIENT_ID: Optional[str] = None
    COGNITO_CLIENT_SECRET: Optional[str] = None

    # Secrets Manager names; only read when no database is configured via env
    DB_SECRET_NAME: Optional[str] = None
    COGNITO_SECRET_NAME: Optional[str] = None

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    SESSION_TTL: int = 86400  # 24 hours in seconds

    # S3 (when set, file version blobs are stored in S3)
    S3_BUCKET_NAME: Optional[str] = None
    S3_REGION: Optional[str] = None  # defaults to AWS_REGION

    # Local blob directory when S3_BUCKET_NAME is not set
    UPLOAD_DIR: str = "uploads"

    # Uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    ALLOWED_UPLOAD_EXTENSIONS: List[str] = [
        ".pdf",
        ".jpg", ".jpeg", ".png", ".gif", ".webp",
        ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".txt",
        ".zip",
    ]
    ALLOWED_UPLOAD_MIME_TYPES: List[str] = [
        "application/pdf",
        "image/jpeg", "image/png", "image/gif", "image/webp",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "text/plain",
        "application/zip", "application/x-zip-compressed",
    ]
    VERSION_ASSIGN_ATTEMPTS: int = 5

    # Relay
    HISTORY_LIMIT: int = 100
    RELAY_QUEUE_SIZE: int = 256
    RELAY_DEDUP_WINDOW: int = 4096

    # Optional
    DEBUG: bool = False
    PROJECT_NAME: str = "Room Chat Backend"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @property
    def use_s3(self) -> bool:
        return bool(self.S3_BUCKET_NAME)

    @property
    def s3_region(self) -> str:
        return self.S3_REGION or self.AWS_REGION

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASS}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

# Load credentials from AWS Secrets Manager only when the database isn't
# already configured via environment variables (e.g. in Docker / local dev).
if not settings.DATABASE_URL and not settings.DB_HOST and settings.DB_SECRET_NAME:
    from app.aws.secrets import get_secret

    _db_secret = get_secret(settings.DB_SECRET_NAME, region_name=settings.AWS_REGION)
    settings.DB_HOST = _db_secret["host"]
    settings.DB_PORT = int(_db_secret.get("port", 5432))
    settings.DB_NAME = _db_secret["database"]
    settings.DB_USER = _db_secret["username"]
    settings.DB_PASS = _db_secret["password"]

    if settings.COGNITO_SECRET_NAME:
        _cognito_secret = get_secret(settings.COGNITO_SECRET_NAME, region_name=settings.COGNITO_REGION)
        settings.COGNITO_USER_POOL_ID = _cognito_secret["user_pool_id"]
        settings.COGNITO_CLIENT_ID = _cognito_secret["client_id"]
        settings.COGNITO_CLIENT_SECRET = _cognito_secret.get("client_secret")
