import base64
import logging
from dataclasses import dataclass
from datetime import date, timedelta

import urllib3

logger = logging.getLogger(__name__)

CAT_INDICES_URL = (
    "https://{endpoint}/_cat/indices/*{year}*{month}*{day}*"
    "?v&h=index,pri.store.size,pri&format=json&bytes=b"
)


@dataclass(frozen=True)
class SourceResult:
    text: str = None
    error: str = None
    exception: Exception = None

    @property
    def ok(self):
        return self.error is None


def read_file(path):
    """Read the whole file as the _cat/indices JSON payload."""
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        return SourceResult(error=f"Could not read file '{path}': {e}", exception=e)
    logger.info(f"Read {len(text)} characters from {path}")
    return SourceResult(text=text)


def yesterday(today=None):
    return (today or date.today()) - timedelta(days=1)


def build_api_url(endpoint, day):
    """Build the _cat/indices URL for indexes whose names carry the given date."""
    return CAT_INDICES_URL.format(
        endpoint=endpoint,
        year=f"{day.year:04d}",
        month=f"{day.month:02d}",
        day=f"{day.day:02d}",
    )


# Encode credentials for Basic Auth header
def _auth_header(username, password):
    auth_string = f"{username}:{password}"
    auth_encoded = base64.b64encode(auth_string.encode()).decode()
    return {"Authorization": f"Basic {auth_encoded}"}


def fetch_from_server(url, username=None, password=None, verify_certs=True):
    """
    GET the URL once and return the response body.

    Any HTTP status of 400 or above is a failure. There are no retries and no
    redirects are followed.
    """
    headers = _auth_header(username, password or "") if username else {}

    if verify_certs:
        http = urllib3.PoolManager()
    else:
        # Suppress all urllib3 warnings (including TLS-related)
        urllib3.disable_warnings()
        http = urllib3.PoolManager(cert_reqs="CERT_NONE", assert_hostname=False)

    logger.info(f"Requesting {url}")
    try:
        with http:
            response = http.request("GET", url, headers=headers, retries=False)
    except urllib3.exceptions.HTTPError as e:
        return SourceResult(error=f"Request to {url} failed: {e}", exception=e)

    if response.status >= 400:
        e = urllib3.exceptions.HTTPError(f"HTTP {response.status} from {url}")
        return SourceResult(error=str(e), exception=e)

    try:
        text = response.data.decode("utf-8")
    except UnicodeDecodeError as e:
        return SourceResult(error=f"Response from {url} is not UTF-8: {e}", exception=e)
    return SourceResult(text=text)
