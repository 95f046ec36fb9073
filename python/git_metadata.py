"""
Annotate blog posts with git and GitHub metadata.

For each post in the content directory this writes into the frontmatter:

    last_modified_at: date of the newest commit touching the post
    author:           GitHub profile of whoever committed the post first
    author_username:  the author's GitHub login
    editors:          everyone who committed to the post, most commits first

Posts without git history are left alone and reported as warnings.
"""
import argparse
import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from contributors import ContributorAggregator
from git_history import GitHistory
from github_identity import GitHubIdentityResolver
from post_frontmatter import DELIMITER, rebuild_frontmatter, separate_frontmatter

logger = logging.getLogger("git_metadata")

CONTENT_DIR = os.path.join("site", "content")
EXCLUDED_FILES = {"gallery.md"}
GIT_METADATA_WORKERS = int(os.getenv("GIT_METADATA_WORKERS", "1"))


@dataclass
class Document:
    path: Path
    data: dict = field(default_factory=dict)
    body: str = ""
    # frontmatter as read from disk, None for documents not loaded from a file
    loaded: Optional[dict] = None

    @property
    def changed(self) -> bool:
        return self.data != self.loaded


def load_documents(content_dir) -> list[Document]:
    documents = []
    for md_file in sorted(Path(content_dir).resolve().glob("*.md")):
        if md_file.name in EXCLUDED_FILES:
            continue

        with open(md_file, "r", encoding="utf-8") as f:
            content = f.read()

        data, body = separate_frontmatter(content)
        if content.startswith(DELIMITER) and body == content:
            logger.warning("Skipping %s: frontmatter could not be parsed", md_file)
            continue

        documents.append(Document(path=md_file, data=data, body=body, loaded=copy.deepcopy(data)))

    return documents


def save_document(doc: Document):
    header = rebuild_frontmatter(doc.data)
    with open(doc.path, "w", encoding="utf-8") as f:
        f.write(f"{header}{doc.body}")


def annotate_last_modified(documents: list[Document], history: GitHistory) -> int:
    annotated = 0
    for doc in documents:
        last_modified = history.last_modified(doc.path)
        if last_modified:
            doc.data["last_modified_at"] = last_modified
            annotated += 1
        else:
            logger.warning("GitLastUpdated: No git history found for %s", doc.path)
    return annotated


def annotate_contributors(documents: list[Document], aggregator: ContributorAggregator) -> int:
    annotated = 0
    for doc in documents:
        logger.debug("GitMetadata: Processing file: %s", doc.path)
        contributors = aggregator.aggregate(doc.path)
        if contributors is None:
            logger.warning("GitMetadata: No git history found for %s", doc.path)
            continue

        doc.data["editors"] = [editor.to_dict() for editor in contributors.editors]

        if contributors.author.ok:
            doc.data["author"] = contributors.author.identity.to_dict()
            doc.data["author_username"] = contributors.author_username
        else:
            logger.warning("GitMetadata: Could not resolve author %s of %s (%s): %s",
                           contributors.author.email, doc.path,
                           contributors.author.status.value, contributors.author.detail)

        annotated += 1
    return annotated


def main():
    parser = argparse.ArgumentParser(description="Add git and GitHub metadata to blog posts")
    parser.add_argument("--content-dir", default=CONTENT_DIR, help=f"Directory of posts (default: {CONTENT_DIR})")
    parser.add_argument("--repo", default=None, help="Git working directory (default: current directory)")
    parser.add_argument("--workers", type=int, default=GIT_METADATA_WORKERS, help="Concurrent GitHub lookups per post")
    parser.add_argument("--dry-run", action="store_true", help="Annotate without writing files")
    parser.add_argument("--skip-last-modified", action="store_true")
    parser.add_argument("--skip-contributors", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(message)s")

    documents = load_documents(args.content_dir)
    history = GitHistory(repo_dir=args.repo)

    dated = 0
    if not args.skip_last_modified:
        dated = annotate_last_modified(documents, history)

    attributed = 0
    if not args.skip_contributors:
        aggregator = ContributorAggregator(history, GitHubIdentityResolver(), max_workers=args.workers)
        attributed = annotate_contributors(documents, aggregator)

    if not args.dry_run:
        for doc in documents:
            if doc.changed:
                save_document(doc)

    print(f"Processed {len(documents)} posts: {dated} dated, {attributed} attributed")


if __name__ == '__main__':
    main()
