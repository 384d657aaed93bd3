"""Shared requests session factory for upstream clients."""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


def create_session(max_retries: int = 0) -> requests.Session:
    """
    Create a requests session with an explicit retry policy.

    Upstream failures surface to the caller immediately by default
    (``max_retries=0``); retrying is left to higher layers.

    Args:
        max_retries: Transport-level retries for idempotent requests.

    Returns:
        requests.Session: Configured session object.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=0.5,
        status_forcelist=[502, 503, 504],
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})

    return session
