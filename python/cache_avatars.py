#!/usr/bin/env python3
"""Cache GitHub avatars for everyone credited on a blog post."""

import argparse
import os
import urllib.request

from git_metadata import CONTENT_DIR, load_documents

AVATARS_DIR = os.path.join("site", "static", "images", "avatars")
AVATAR_URL = "https://github.com/{username}.png?size=128"


def collect_usernames(documents) -> set[str]:
    """Collect every GitHub username referenced by post frontmatter."""
    usernames = set()

    for doc in documents:
        data = doc.data
        candidates = [data.get("author_username")]

        author = data.get("author")
        if isinstance(author, dict):
            candidates.append(author.get("username"))

        for editor in data.get("editors") or []:
            if isinstance(editor, dict):
                candidates.append(editor.get("username"))

        authors = data.get("authors")
        if isinstance(authors, list):
            candidates.extend(authors)

        usernames.update(c for c in candidates if isinstance(c, str) and c)

    return usernames


def download_avatar(username: str, avatars_dir: str, force: bool = False) -> bool:
    avatar_url = AVATAR_URL.format(username=username)
    avatar_path = os.path.join(avatars_dir, f"{username}.png")

    if os.path.exists(avatar_path) and not force:
        print(f"Avatar for {username} already exists, skipping")
        return False

    try:
        urllib.request.urlretrieve(avatar_url, avatar_path)
    except OSError as e:
        print(f"✗ Failed to download avatar for {username}: {e}")
        return False

    print(f"✓ Downloaded avatar for {username}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Cache GitHub avatars of post authors and editors")
    parser.add_argument("--content-dir", default=CONTENT_DIR)
    parser.add_argument("--avatars-dir", default=AVATARS_DIR)
    parser.add_argument("--force", action="store_true", help="Re-download avatars that already exist")
    args = parser.parse_args()

    os.makedirs(args.avatars_dir, exist_ok=True)

    usernames = collect_usernames(load_documents(args.content_dir))
    print(f"Found {len(usernames)} unique users: {sorted(usernames)}\n")

    downloaded = sum(download_avatar(u, args.avatars_dir, force=args.force) for u in sorted(usernames))

    print(f"\nDone! Cached {downloaded} avatars in {args.avatars_dir}")


if __name__ == "__main__":
    main()
