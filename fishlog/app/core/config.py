# fishlog/app/core/config.py
import os
from dotenv import load_dotenv

# Load environment variables from .env.local in the project root
load_dotenv(dotenv_path=os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..', '..', '.env.local')))


# Database holding the key-value table. SQLite is enough for a single angler;
# point this at PostgreSQL (with the 'postgres' extra installed) if you like.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///fishlog.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# The whole entry collection lives under this single key
STORAGE_KEY = os.getenv("FISHLOG_STORAGE_KEY", "fishing-log-entries")

# Maximum size of one stored value in bytes, unset means unlimited.
# Browsers cap localStorage around 5 MB, set 5242880 to mimic that.
_quota = os.getenv("FISHLOG_STORE_QUOTA_BYTES")
STORE_QUOTA_BYTES = int(_quota) if _quota else None

# --- Open-Meteo historical archive ---
WEATHER_ARCHIVE_URL = os.getenv("FISHLOG_WEATHER_ARCHIVE_URL", "https://archive-api.open-meteo.com/v1/archive")
WEATHER_TIMEOUT = float(os.getenv("FISHLOG_WEATHER_TIMEOUT", 15))
WEATHER_ATTEMPTS = int(os.getenv("FISHLOG_WEATHER_ATTEMPTS", 3))
WEATHER_RETRY_WAIT = float(os.getenv("FISHLOG_WEATHER_RETRY_WAIT", 2))

# Used to pick "today" as the default trip date
TIMEZONE = os.getenv("FISHLOG_TIMEZONE", "UTC")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
