import os

from dotenv import load_dotenv

load_dotenv()


def _get_bool(key: str, default: bool) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


CODECHEF_BASE = os.getenv("CODECHEF_BASE", "https://www.codechef.com").rstrip("/")
CODECHEF_HEATMAP_API = os.getenv(
    "CODECHEF_HEATMAP_API", "https://codechef-api.vercel.app"
).rstrip("/")
CODEFORCES_API = os.getenv("CODEFORCES_API", "https://codeforces.com/api").rstrip("/")
CODEFORCES_BASE = os.getenv("CODEFORCES_BASE", "https://codeforces.com").rstrip("/")
LEETCODE_BASE = os.getenv("LEETCODE_BASE", "https://leetcode.com").rstrip("/")

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
HTTP_MAX_ATTEMPTS = int(os.getenv("HTTP_MAX_ATTEMPTS", "3"))
HTTP_BACKOFF_SECONDS = float(os.getenv("HTTP_BACKOFF_SECONDS", "1.0"))
HTTP_FOLLOW_REDIRECTS = _get_bool("HTTP_FOLLOW_REDIRECTS", True)
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "logs/cp-aggregator.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "1048576"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))
