from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # seats.aero partner API
    seats_api_key: str = ""
    seats_base_url: str = "https://seats.aero/partnerapi"
    http_timeout: float = 30.0

    # OpenAI (destination resolver + trip summaries)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    return Settings()
