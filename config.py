import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def parse_origins(value: str):
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class Settings:
    app_name = "Campus Books API"

    database_url = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
    database_name = os.getenv("DATABASE_NAME", "campus_books")

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    secret_key = os.getenv("SECRET_KEY", "supersecretkey")
    jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    cors_origins = parse_origins(os.getenv("CORS_ORIGINS", "*"))
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    default_page_limit = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
    max_page_limit = int(os.getenv("MAX_PAGE_LIMIT", "100"))

    @property
    def access_token_expires(self) -> timedelta:
        return timedelta(minutes=self.access_token_expire_minutes)


settings = Settings()
