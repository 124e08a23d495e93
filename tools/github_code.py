"""GitHub link extraction and best-effort source download for video descriptions."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
_URL_BODY = r"https?://(?:www\.)?github\.com/[^\s<>()\[\]\"']+"

# Evaluated in order; the first pattern with a match wins.
GITHUB_LINK_PATTERNS: Tuple[Tuple[str, re.Pattern], ...] = (
    ("solution", re.compile(rf"\bsolution\s*:?\s*({_URL_BODY})", re.IGNORECASE)),
    ("code", re.compile(rf"\b(?:code|source)\s*:?\s*({_URL_BODY})", re.IGNORECASE)),
    ("blob", re.compile(r"(https?://(?:www\.)?github\.com/[\w.-]+/[\w.-]+/blob/[^\s<>()\[\]\"']+)", re.IGNORECASE)),
    ("generic", re.compile(rf"({_URL_BODY})", re.IGNORECASE)),
)

SOURCE_EXTENSIONS = (
    "py", "java", "cpp", "cc", "c", "h", "js", "ts", "go", "rb", "kt", "swift", "cs", "rs", "scala", "php",
)
SOLUTION_NAME_HINTS = ("solution", "solve")


def extract_github_link(description: str) -> str:
    """Return the first GitHub URL found by the ordered patterns, or ``""``."""
    for _label, pattern in GITHUB_LINK_PATTERNS:
        match = pattern.search(description or "")
        if match:
            return match.group(1).rstrip(".,;:!?")
    return ""


def file_type(url: str) -> Optional[str]:
    path = url.split("#", 1)[0].split("?", 1)[0]
    name = path.rstrip("/").rsplit("/", 1)[-1]
    if "." not in name:
        return None
    return name.rsplit(".", 1)[-1].lower()


def to_raw_url(blob_url: str) -> str:
    raw = re.sub(r"^https?://(?:www\.)?github\.com/", "https://raw.githubusercontent.com/", blob_url)
    return raw.replace("/blob/", "/", 1)


def parse_repository(url: str) -> Optional[Tuple[str, str]]:
    match = re.match(r"https?://(?:www\.)?github\.com/([\w.-]+)/([\w.-]+)", url)
    if not match:
        return None
    repo = match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return match.group(1), repo


def pick_solution_file(entries: List[Dict]) -> Optional[Dict]:
    """Prefer files named like a solution, then any known source file."""
    files = [entry for entry in entries if entry.get("type") == "file"]
    for entry in files:
        name = entry.get("name", "").lower()
        if any(hint in name for hint in SOLUTION_NAME_HINTS):
            return entry
    for entry in files:
        if file_type(entry.get("name", "")) in SOURCE_EXTENSIONS:
            return entry
    return None


class GitHubCodeFetcher:
    """Raw-file fetcher plus repository listing over the public GitHub endpoints."""

    def __init__(self, session: Optional[requests.Session] = None, token: str = "", timeout: float = 10.0):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {"Accept": "application/vnd.github+json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def fetch_text(self, url: str) -> str:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def list_repository(self, owner: str, repo: str) -> List[Dict]:
        response = self.session.get(
            f"{GITHUB_API_URL}/repos/{owner}/{repo}/contents",
            headers=self.headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        return payload if isinstance(payload, list) else []


def resolve_github_code(url: str, fetcher) -> Dict[str, Optional[str]]:
    """
    Download the code a GitHub link points at.

    ``/blob/`` links are fetched directly. Repository roots are listed and a
    solution-like file is chosen. Failures are logged and leave the fields
    empty.
    """
    result: Dict[str, Optional[str]] = {"githubCode": None, "githubUrl": url or None, "githubFileType": None}
    if not url:
        return result

    try:
        if "/blob/" in url:
            result["githubCode"] = fetcher.fetch_text(to_raw_url(url))
            result["githubFileType"] = file_type(url)
            return result

        repository = parse_repository(url)
        if repository is None:
            return result

        entry = pick_solution_file(fetcher.list_repository(*repository))
        if entry is None:
            return result

        download_url = entry.get("download_url") or to_raw_url(entry.get("html_url", ""))
        result["githubCode"] = fetcher.fetch_text(download_url)
        result["githubUrl"] = entry.get("html_url") or url
        result["githubFileType"] = file_type(entry.get("name", ""))
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("GitHub code lookup failed for %s: %s", url, exc)

    return result
