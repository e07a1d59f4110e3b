"""
Shared constants used across all probe modules.

Centralises endpoint lists, retry tunables, and payload sizes so they live
in exactly one place.
"""

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
}

UPLOAD_HEADERS = {"Content-Type": "application/octet-stream"}

# ---------------------------------------------------------------------------
# Candidate endpoints (first entry is preferred)
# ---------------------------------------------------------------------------

LATENCY_URLS = [
    "https://www.google.com",
    "https://www.cloudflare.com",
    "https://www.amazon.com",
]

# The three resources have different sizes; see DOWNLOAD_ASSUMED_BYTES.
DOWNLOAD_URLS = [
    "https://file-examples-com.github.io/uploads/2017/10/file_example_JPG_100kB.jpg",
    "https://github.com/mozilla/pdf.js/blob/master/web/compressed.tracemonkey-pldi-09.pdf?raw=true",
    "https://download.samplelib.com/mp4/sample-1s.mp4",
]

UPLOAD_URLS = [
    "https://httpbin.org/post",
    "https://ptsv2.com/t/n3z2v-1639299935/post",
    "https://postman-echo.com/post",
]

# ---------------------------------------------------------------------------
# Retry / backoff
# ---------------------------------------------------------------------------

DEFAULT_RETRIES = 3
DEFAULT_BACKOFF = 0.5            # seconds before the second attempt
DEFAULT_REQUEST_TIMEOUT = 10.0   # seconds per attempt

MIN_RETRIES = 1
MAX_RETRIES = 10
MAX_BACKOFF = 60.0
MAX_REQUEST_TIMEOUT = 300.0

# ---------------------------------------------------------------------------
# Data transfer
# ---------------------------------------------------------------------------

DOWNLOAD_ASSUMED_BYTES = 100_000        # 0.1 MB, size of the first candidate
UPLOAD_PAYLOAD_BYTES = 1024 * 1024      # 1 MB of zero bytes
UPLOAD_PAYLOAD_MEGABITS = 8.0           # payload counted as 1 MB * 8

# Clock resolution used when a request completes within the same tick.
MIN_ELAPSED_SECONDS = 0.001

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

FAILURE_MARKER = "Error"

PROBE_LATENCY = "latency"
PROBE_DOWNLOAD = "download"
PROBE_UPLOAD = "upload"
