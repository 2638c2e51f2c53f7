from dotenv import load_dotenv
import os

load_dotenv()

# Base & data directories
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.getenv("AUTOSORT_DATA_DIR", os.path.join(os.getcwd(), "data"))

# JSON-backed stores
CREDENTIALS_FILE = os.path.join(DATA_DIR, "credentials.json")
PREFERENCES_FILE = os.path.join(DATA_DIR, "preferences.json")
SORT_LOG_FILE = os.path.join(DATA_DIR, "sort_log.json")

# Spotify credentials (REQUIRED)
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET")

# Spotify API constants
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_BASE = "https://api.spotify.com/v1"

# Runtime environment ("development" relaxes the cron secret check)
AUTOSORT_ENV = os.getenv("AUTOSORT_ENV", "production")
AUTOSORT_LOG_LEVEL = os.getenv("AUTOSORT_LOG_LEVEL", "INFO")
CRON_SECRET = os.getenv("CRON_SECRET")
ALLOWED_ORIGIN = os.getenv("AUTOSORT_ALLOWED_ORIGIN", "http://localhost:3000")

# Token lifecycle
TOKEN_EXPIRY_MARGIN_SECONDS = 5 * 60
REFRESH_LOCK_TTL_SECONDS = 60
REFRESH_LOCK_SWEEP_INTERVAL_SECONDS = 5 * 60

# Outbound calls
REQUEST_TIMEOUT_SECONDS = 30
DEFAULT_RETRY_AFTER_SECONDS = 60

# Spotify per-call limits
PLAYLIST_WRITE_LIMIT = 100
PLAYLIST_TRACKS_PAGE_SIZE = 100
USER_PLAYLISTS_PAGE_SIZE = 50
AUDIO_FEATURES_BATCH_SIZE = 100
PAGE_FETCH_WORKERS = 4

# Pacing between writes
CHUNK_DELAY_SECONDS = 0.05
PLAYLIST_DELAY_SECONDS = 0.1

# Inbound rate limits (requests per window, per client)
SORT_RATE_LIMIT = 10
SETTINGS_RATE_LIMIT = 20
RATE_LIMIT_WINDOW_SECONDS = 60

SORT_LOG_DEFAULT_LIMIT = 50
