import os
from pathlib import Path

from pydantic_settings import BaseSettings


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
        return Path(base) / "knot"
    return Path.home() / ".knot"


class Settings(BaseSettings):
    APP_NAME: str = "Knot"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    DATABASE_URL: str = f"sqlite:///{(_default_data_dir() / 'knot.db').as_posix()}"
    ENABLE_LOGGING: bool = False

    HOST: str = "localhost"
    PORT: int = 3000

    CORS_ORIGINS: str = "*"

    # The export endpoint falls back to this when no locale cookie is sent
    EXPORT_DEFAULT_LOCALE: str = "zh"
    SEARCH_LIMIT: int = 50
    # Deepest parameter tree an import may create
    MAX_PARAMETER_DEPTH: int = 64

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

_db_path = os.getenv("KNOT_DB_PATH")
if _db_path:
    db_path = Path(_db_path).expanduser().resolve()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.DATABASE_URL = f"sqlite:///{db_path.as_posix()}"
else:
    _data_dir = os.getenv("KNOT_DATA_DIR")
    if _data_dir:
        data_dir = Path(_data_dir).expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        settings.DATABASE_URL = f"sqlite:///{(data_dir / 'knot.db').as_posix()}"
