from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    smartstudy_data_dir: Path = Path.home() / ".smartstudy" / "data"
    sqlite_filename: str = "smartstudy.db"
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "info"

    ollama_base_url: str = "http://localhost:11434"
    chat_model: str = "llama3.1"
    relay_timeout: float = 120.0

    default_item_count: int = 15  # items per generate call when not given

    model_config = {"env_prefix": "SMARTSTUDY_"}


settings = Settings()
