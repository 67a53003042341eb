import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    jpdb_api_key: str = os.getenv("JPDB_API_KEY", "")
    jpdb_api_base_url: str = os.getenv("JPDB_API_BASE_URL", "https://jpdb.io/api/v1/")
    jpdb_site_url: str = os.getenv("JPDB_SITE_URL", "https://jpdb.io")
    request_timeout_s: float = float(os.getenv("REQUEST_TIMEOUT_S", "30"))
    cache_dir: Path = Path(os.getenv("CACHE_DIR", ".deck_occurrences"))
    cache_slot_key: str = os.getenv("CACHE_SLOT_KEY", "vv_decks")


settings = Settings()
