from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    upstream_api_base: str = "http://localhost:8080/api"
    # None disables the timeout; set per deployment.
    upstream_timeout_seconds: float | None = None
    auth_cookie_name: str = "auth_token"
    cors_origins: str = "http://localhost:3000"


settings = Settings()
