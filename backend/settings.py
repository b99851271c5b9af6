"""
Centralized runtime configuration for the collector.

This module uses `python-dotenv` to read a local `.env` file during
development and exposes a Pydantic `Settings` model named `settings`.

Environment variables used:
- `STORAGE_PATH`: JSON document holding visits and actions.
- `GEOIP_DB_PATH`: optional MaxMind country database for visit geo lookup.
- `LOG_LEVEL`: root log level applied by `main.create_app()`.
- `MAX_ACTIONS_LIMIT`: maximum `limit` allowed on `GET /actions`.

Example `.env`:
STORAGE_PATH=/app/data/storage.json
LOG_LEVEL=DEBUG

"""

from pydantic import BaseModel
import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_STORAGE_PATH = "data/storage.json"


class Settings(BaseModel):
    """Typed settings container.

    All downstream code should import `settings` from this module. Use
    these attributes (not os.getenv) so tests can build their own
    `Settings(storage_path=...)` and hand it to `main.create_app()`.
    """

    # A blank STORAGE_PATH counts as unset.
    storage_path: str = os.getenv("STORAGE_PATH", "").strip() or DEFAULT_STORAGE_PATH
    geoip_db_path: str = os.getenv("GEOIP_DB_PATH", "/geoip/GeoLite2-Country.mmdb")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    max_actions_limit: int = int(os.getenv("MAX_ACTIONS_LIMIT", "10000"))


settings = Settings()
