"""
GroupHunt Configuration Constants
Centralized constants for the scanning engine, result store and CLI
"""

# Candidate space
MAX_GROUP_ID = 5_000_000

# Worker retry/backoff behaviour
COOLDOWN_SECONDS = 60.0
RECONNECT_THRESHOLD = 5
MAX_CONNECTION_ATTEMPTS = 5
DEFAULT_MINIMUM_ROBUX = 1

# Default timeouts (in seconds)
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_STOP_GRACE = 10.0

# Files
PROXIES_FILE = "proxies.json"
RESULTS_FILE = "robux.txt"
API_KEY_FILE = "api.key"

# Remote API endpoints
FUNDS_CHECK_URL = "https://economy.roblox.com/v1/groups/{group_id}/currency"
OWNER_CHECK_URL = "https://groups.roblox.com/v1/groups/{group_id}"
GROUP_PAGE_URL = "https://roblox.com/groups/{group_id}"
RATE_LIMIT_MESSAGE = "TooManyRequests"

# Proxy list source (plain host:port lines)
PROXY_LIST_SOURCE_URL = (
    "https://api.proxyscrape.com/?request=getproxies"
    "&proxytype=socks5&timeout=10000&country=all"
)
PROXY_LIST_FETCH_TIMEOUT = 30

# Result file line grammar
RESULT_LINE_LABEL = "Group"
RESULT_LINE_UNIT = "robux"
RESULT_LINE_PATTERN = r"^Group (\d+) has (\d+) robux\.$"

# Logging configuration
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_LEVEL = 'WARNING'
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Third-party loggers to suppress
NOISY_LOGGERS = [
    'requests.packages.urllib3.connectionpool',
    'urllib3.connectionpool',
    'aiohttp.access',
    'aiohttp.client',
]

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

# Premium tiers used by the monitor's "better than premium" comparison
PREMIUM_TIERS = [
    # (robux per month, price label), ascending
    (450, "$4.99"),
    (1000, "$9.99"),
    (2200, "$19.99"),
]
SECONDS_IN_MONTH = 60 * 60 * 24 * 30

# Monitor refresh
MONITOR_REFRESH_SECONDS = 1.0
