"""
Resolve a committer email to a GitHub identity via the commit search API.

The commit search endpoint only answers with the preview media type, so every
request carries it. There is one attempt per call and no caching: resolving
the same email twice performs two lookups.
"""
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests

logger = logging.getLogger(__name__)

GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
GITHUB_TIMEOUT = float(os.getenv("GITHUB_TIMEOUT", "10"))

SEARCH_PATH = "/search/commits"
PREVIEW_ACCEPT = "application/vnd.github.cloak-preview+json"

# quotes and whitespace are never part of a usable address
UNSAFE_EMAIL_CHARS = "'\"` \t\r\n"

UNREADABLE_BODY = "GitHub API returned an unreadable body"


class LookupStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class IdentityRecord:
    username: str
    avatar_url: str
    profile_url: str
    numeric_id: int

    @classmethod
    def from_committer(cls, committer: dict) -> "IdentityRecord":
        return cls(
            username=committer["login"],
            avatar_url=committer.get("avatar_url", ""),
            profile_url=committer.get("html_url", ""),
            numeric_id=int(committer["id"]),
        )

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "avatar": self.avatar_url,
            "url": self.profile_url,
            "id": self.numeric_id,
        }


@dataclass(frozen=True)
class Lookup:
    status: LookupStatus
    email: str
    identity: Optional[IdentityRecord] = None
    detail: str = ""

    @classmethod
    def found(cls, email: str, identity: IdentityRecord) -> "Lookup":
        return cls(LookupStatus.FOUND, email, identity)

    @classmethod
    def not_found(cls, email: str) -> "Lookup":
        return cls(LookupStatus.NOT_FOUND, email, detail=f"No GitHub user found for {email}")

    @classmethod
    def transport_failure(cls, email: str, detail: str) -> "Lookup":
        return cls(LookupStatus.TRANSPORT_FAILURE, email, detail=detail)

    @property
    def ok(self) -> bool:
        return self.status is LookupStatus.FOUND


def sanitize_email(email: str) -> str:
    return "".join(c for c in email if c not in UNSAFE_EMAIL_CHARS)


def build_search_request(email: str, api_url: str = GITHUB_API_URL, token: Optional[str] = GITHUB_TOKEN) -> requests.PreparedRequest:
    """
    Build the commit search request for an email.

    The query goes through `params`, so characters such as `+`, `&`, `#` and
    `?` are percent-encoded instead of leaking into the URL structure.
    """
    headers = {"Accept": PREVIEW_ACCEPT}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    return requests.Request(
        "GET",
        api_url.rstrip("/") + SEARCH_PATH,
        params={"q": f"author-email:{sanitize_email(email)}"},
        headers=headers,
    ).prepare()


class GitHubIdentityResolver:
    def __init__(self, session=None, api_url: str = GITHUB_API_URL, token: Optional[str] = GITHUB_TOKEN,
                 timeout: Optional[float] = GITHUB_TIMEOUT):
        self.session = session or requests.Session()
        self.api_url = api_url
        self.token = token
        self.timeout = timeout

    def resolve(self, email: str) -> Lookup:
        if not sanitize_email(email):
            return Lookup.not_found(email)

        request = build_search_request(email, self.api_url, self.token)
        logger.debug("looking up GitHub user for %s", email)

        try:
            response = self.session.send(request, timeout=self.timeout)
        except requests.RequestException as e:
            return Lookup.transport_failure(email, f"Request to GitHub API failed: {e}")

        if not 200 <= response.status_code < 300:
            return Lookup.transport_failure(email, f"GitHub API returned {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            return Lookup.transport_failure(email, UNREADABLE_BODY)

        if not isinstance(payload, dict):
            return Lookup.transport_failure(email, UNREADABLE_BODY)

        items = payload.get("items") or []
        if not isinstance(items, list):
            return Lookup.transport_failure(email, UNREADABLE_BODY)

        if not items:
            return Lookup.not_found(email)

        if not isinstance(items[0], dict):
            return Lookup.transport_failure(email, UNREADABLE_BODY)

        committer = items[0].get("committer")
        if committer is None:
            # commits pushed with an unlinked email have a null committer
            return Lookup.not_found(email)
        if not isinstance(committer, dict):
            return Lookup.transport_failure(email, UNREADABLE_BODY)

        try:
            identity = IdentityRecord.from_committer(committer)
        except (KeyError, TypeError, ValueError):
            return Lookup.transport_failure(email, "GitHub API returned a committer without login or id")

        logger.debug("committer username for %s: %s", email, identity.username)
        return Lookup.found(email, identity)

    def username_for(self, email: str) -> Optional[str]:
        lookup = self.resolve(email)
        return lookup.identity.username if lookup.ok else None
