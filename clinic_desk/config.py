"""Settings loaded from the environment (and a local .env file)."""
import logging

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    # empty key disables bearer auth on the HTTP API
    api_key: str = Field(default="", alias="FRONT_DESK_API_KEY")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    date_input_format: str = Field(default="%d/%m/%Y", alias="DATE_INPUT_FORMAT")
    clinic_name: str = Field(default="Clinic", alias="CLINIC_NAME")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
