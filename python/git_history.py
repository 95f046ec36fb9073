"""
Read per-file commit facts from git.

Every query runs `git log` with an argument vector, so paths are never
interpreted by a shell. A failing or missing git binary reads as "no history".
"""
import logging
import subprocess
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\t"


@dataclass(frozen=True)
class CommitRecord:
    author_email: str
    timestamp: str


class GitHistory:
    def __init__(self, repo_dir=None, git: str = "git", runner=subprocess.run):
        self.repo_dir = repo_dir
        self.git = git
        self.runner = runner

    def _log(self, path, *options: str) -> list[str]:
        """Run `git log <options> -- <path>` and return one output line per commit."""
        args = [self.git, "log", *options, "--", str(path)]
        try:
            result = self.runner(
                args,
                cwd=self.repo_dir,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            logger.debug("could not run %s: %s", args[0], e)
            return []

        if result.returncode != 0:
            logger.debug("git log exited %d for %s: %s", result.returncode, path, result.stderr.strip())
            return []

        return result.stdout.splitlines()

    def last_modified(self, path) -> Optional[str]:
        """Date of the newest commit touching path (following renames), in strict ISO-8601."""
        lines = self._log(path, "--follow", "--format=%ad", "--date=iso-strict")
        return next((line.strip() for line in lines if line.strip()), None)

    def first_author_email(self, path) -> Optional[str]:
        lines = self._log(path, "--reverse", "--format=%ae")
        # an empty first line is a commit with no author email, not a missing one
        return lines[0].strip() if lines else None

    def commits(self, path) -> list[CommitRecord]:
        """Every commit touching path, newest first."""
        lines = self._log(path, f"--format=%ae{FIELD_SEPARATOR}%ad", "--date=iso-strict")

        records = []
        for line in lines:
            parts = line.split(FIELD_SEPARATOR)
            if len(parts) != 2 or not parts[1].strip():
                continue
            email, timestamp = parts
            records.append(CommitRecord(author_email=email.strip(), timestamp=timestamp.strip()))
        return records

    def commit_emails(self, path) -> list[str]:
        # duplicates are kept, callers count them
        return [commit.author_email for commit in self.commits(path)]
