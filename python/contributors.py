"""
Combine a file's git history with GitHub identities.

The author is whoever made the oldest commit. Editors are every distinct
committer email that resolves to a GitHub user, ranked by how many commits
they made to the file. Equal counts keep the order in which the emails first
appear in `git log` output.
"""
import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from git_history import GitHistory
from github_identity import GitHubIdentityResolver, IdentityRecord, Lookup

logger = logging.getLogger(__name__)

CONTRIBUTIONS_KEY = "contributionsInCurrPage"


@dataclass(frozen=True)
class EditorEntry:
    identity: IdentityRecord
    contribution_count: int

    def to_dict(self) -> dict:
        return {**self.identity.to_dict(), CONTRIBUTIONS_KEY: self.contribution_count}


@dataclass
class ContributorSet:
    author: Lookup
    editors: list[EditorEntry] = field(default_factory=list)

    @property
    def author_username(self) -> Optional[str]:
        return self.author.identity.username if self.author.ok else None


def count_emails(emails: list[str]) -> Counter:
    # Counter keeps first-insertion order, which the tie-break relies on
    return Counter(emails)


def rank_editors(entries: list[EditorEntry]) -> list[EditorEntry]:
    return sorted(entries, key=lambda e: e.contribution_count, reverse=True)


class ContributorAggregator:
    def __init__(self, history: GitHistory, resolver: GitHubIdentityResolver, max_workers: int = 1):
        self.history = history
        self.resolver = resolver
        self.max_workers = max_workers

    def _resolve_all(self, emails: list[str]) -> list[Lookup]:
        if self.max_workers <= 1 or len(emails) <= 1:
            return [self.resolver.resolve(email) for email in emails]

        # map() yields in input order, not completion order
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(self.resolver.resolve, emails))

    def editors(self, path) -> list[EditorEntry]:
        counts = count_emails(self.history.commit_emails(path))
        lookups = self._resolve_all(list(counts))

        entries = []
        for lookup in lookups:
            if not lookup.ok:
                logger.debug("dropping editor %s for %s: %s", lookup.email, path, lookup.status.value)
                continue
            entries.append(EditorEntry(lookup.identity, counts[lookup.email]))

        return rank_editors(entries)

    def aggregate(self, path) -> Optional[ContributorSet]:
        """Return the author and ranked editors of path, or None when git has no history for it."""
        author_email = self.history.first_author_email(path)
        if author_email is None:
            return None

        author = self.resolver.resolve(author_email)
        return ContributorSet(author=author, editors=self.editors(path))
