"""Display-only version string derived from the repository's commit count.

Any failure degrades to a static ``V1.0``; nothing here ever raises.
"""

from __future__ import annotations

from datetime import datetime

import httpx
from pydantic import BaseModel

from dataorganizer.logging import EventType, emit_warning

GITHUB_API = "https://api.github.com"
DEFAULT_VERSION = "V1.0"


class VersionInfo(BaseModel):
    version: str
    last_updated: str
    error: str | None = None


def _display_time(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def get_version_info(
    repo: str,
    *,
    client: httpx.Client | None = None,
    timeout: float = 5.0,
) -> VersionInfo:
    """Fetch ``V1.<commit count>`` and the latest commit date for *repo*.

    Args:
        repo: ``owner/name`` on GitHub.
        client: Optional preconfigured client (tests pass a mock transport).
        timeout: Request timeout in seconds.
    """
    url = f"{GITHUB_API}/repos/{repo}/commits"
    headers = {"Accept": "application/vnd.github.v3+json"}
    try:
        if client is None:
            with httpx.Client(timeout=timeout) as own_client:
                resp = own_client.get(url, headers=headers)
        else:
            resp = client.get(url, headers=headers)
        resp.raise_for_status()
        commits = resp.json()
        latest = commits[0]["commit"]["author"]["date"]
        updated = datetime.fromisoformat(latest.replace("Z", "+00:00"))
        return VersionInfo(version=f"V1.{len(commits)}", last_updated=_display_time(updated))
    except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
        emit_warning(
            EventType.version_lookup_failed,
            f"Could not fetch version information: {exc}",
            {"repo": repo},
        )
        return VersionInfo(
            version=DEFAULT_VERSION,
            last_updated=_display_time(datetime.now()),
            error="Could not fetch version information",
        )
