import os
from dotenv import load_dotenv

load_dotenv()  # Load variables from .env file

SERVICE_NAME = os.getenv("SERVICE_NAME", "chartdesk-api")

# Supabase (auth, PostgREST, storage)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
SUPABASE_TIMEOUT = float(os.getenv("SUPABASE_TIMEOUT", "10"))  # seconds

PROFILES_TABLE = os.getenv("PROFILES_TABLE", "user_profiles")
CHARTS_TABLE = os.getenv("CHARTS_TABLE", "charts")
TRADE_INSIGHTS_TABLE = os.getenv("TRADE_INSIGHTS_TABLE", "trade_insights")
CHARTS_BUCKET = os.getenv("CHARTS_BUCKET", "charts")

# Trade insight ingest is open unless a key is configured (private automation caller)
INSIGHT_INGEST_API_KEY = os.getenv("INSIGHT_INGEST_API_KEY") or None
INSIGHTS_DEFAULT_LIMIT = int(os.getenv("INSIGHTS_DEFAULT_LIMIT", "10"))
INSIGHTS_MAX_LIMIT = int(os.getenv("INSIGHTS_MAX_LIMIT", "100"))

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:4321",
]
ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "").split(",")
    if o.strip()
] or DEFAULT_ALLOWED_ORIGINS

# Client components
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
INSIGHT_POLL_INTERVAL = int(os.getenv("INSIGHT_POLL_INTERVAL", "60"))  # seconds

# Logging
LOG_FILE = os.getenv("LOG_FILE", "charts-api.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
