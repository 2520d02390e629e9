from pathlib import Path
from urllib.parse import urlsplit

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Prismic
    PRISMIC_API_ENDPOINT: str = "https://spacetraveling.cdn.prismic.io/api/v2"
    PRISMIC_ACCESS_TOKEN: str = ""
    PRISMIC_TIMEOUT_SECONDS: float = 10.0
    POSTS_DOCUMENT_TYPE: str = "posts"

    # Static generation
    HOME_PAGE_SIZE: int = 1
    PREBUILT_POSTS_PAGE_SIZE: int = 2
    POST_REVALIDATE_SECONDS: int = 60 * 60 * 24  # 24 hours
    PRERENDER_ON_STARTUP: bool = True
    BUILD_OUTPUT_DIR: str = "out"
    PAGE_CACHE_MAX_PAGES: int = 1000

    # Listing
    DEDUPE_PAGINATED_POSTS: bool = False
    WORDS_PER_MINUTE: int = 200

    # Site
    SITE_TITLE: str = "spacetraveling"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def prismic_host(self) -> str:
        return urlsplit(self.PRISMIC_API_ENDPOINT).netloc


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
