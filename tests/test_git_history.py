import shutil
import subprocess

import pytest

from fakes import FakeRunner
from git_history import CommitRecord, GitHistory


def test_last_modified_takes_newest_date():
    runner = FakeRunner({"--format=%ad": "2024-03-02T10:00:00+09:00\n2024-01-01T08:00:00+09:00\n"})
    history = GitHistory(runner=runner)

    assert history.last_modified("site/content/1.md") == "2024-03-02T10:00:00+09:00"

    args, kwargs = runner.calls[0]
    assert args[:2] == ["git", "log"]
    assert "--follow" in args
    assert "--date=iso-strict" in args
    assert args[-2:] == ["--", "site/content/1.md"]
    assert "shell" not in kwargs


def test_path_with_shell_metacharacters_is_a_single_argument():
    runner = FakeRunner()
    path = 'posts/"; rm -rf ~; echo "$(whoami)`.md'

    GitHistory(runner=runner).commit_emails(path)

    args, _ = runner.calls[0]
    assert args[-1] == path
    assert args[-2] == "--"


def test_first_author_email_reads_oldest_commit():
    runner = FakeRunner({"reverse:--format=%ae": "first@example.com\nsecond@example.com\n"})

    assert GitHistory(runner=runner).first_author_email("a.md") == "first@example.com"
    assert "--reverse" in runner.calls[0][0]


def test_commits_parses_email_and_timestamp():
    runner = FakeRunner({
        "--format=%ae\t%ad": "c@example.com\t2024-03-01T00:00:00Z\nmalformed line\n\na@example.com\t2024-01-01T00:00:00Z\n",
    })

    commits = GitHistory(runner=runner).commits("a.md")

    assert commits == [
        CommitRecord("c@example.com", "2024-03-01T00:00:00Z"),
        CommitRecord("a@example.com", "2024-01-01T00:00:00Z"),
    ]


def test_commit_emails_keeps_duplicates():
    runner = FakeRunner({
        "--format=%ae\t%ad": "c@x.com\t2024-03-03T00:00:00Z\nc@x.com\t2024-03-02T00:00:00Z\na@x.com\t2024-03-01T00:00:00Z\n",
    })

    assert GitHistory(runner=runner).commit_emails("a.md") == ["c@x.com", "c@x.com", "a@x.com"]


def test_failed_git_log_reads_as_no_history():
    runner = FakeRunner({"--format=%ad": "fatal: not a git repository\n"}, returncode=128)
    history = GitHistory(runner=runner)

    assert history.last_modified("a.md") is None
    assert history.first_author_email("a.md") is None
    assert history.commit_emails("a.md") == []


def test_missing_git_binary_reads_as_no_history(tmp_path):
    history = GitHistory(repo_dir=tmp_path, git=str(tmp_path / "no-such-git"))

    assert history.last_modified("a.md") is None
    assert history.commits("a.md") == []


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(repo, *args, email="a@example.com"):
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", f"user.email={email}", "-c", "commit.gpgsign=false", *args],
        cwd=repo, check=True, capture_output=True,
    )


@pytest.fixture
def repo(tmp_path):
    git(tmp_path, "init", "-q")
    post = tmp_path / "post.md"
    for i, email in enumerate(["a@example.com", "a@example.com", "b@example.com",
                               "c@example.com", "c@example.com", "c@example.com"]):
        post.write_text(f"revision {i}\n")
        git(tmp_path, "add", "post.md")
        git(tmp_path, "commit", "-q", "-m", f"revision {i}", email=email)
    (tmp_path / "untracked.md").write_text("draft\n")
    return tmp_path


@requires_git
def test_reads_a_real_repository(repo):
    history = GitHistory(repo_dir=repo)

    assert history.first_author_email("post.md") == "a@example.com"
    assert history.commit_emails("post.md") == [
        "c@example.com", "c@example.com", "c@example.com",
        "b@example.com", "a@example.com", "a@example.com",
    ]
    assert history.last_modified("post.md") == history.commits("post.md")[0].timestamp


@requires_git
def test_untracked_file_has_no_history(repo):
    history = GitHistory(repo_dir=repo)

    assert history.last_modified("untracked.md") is None
    assert history.first_author_email("untracked.md") is None
    assert history.commit_emails("untracked.md") == []


def test_first_commit_without_author_email_is_still_the_first():
    runner = FakeRunner({"reverse:--format=%ae": "\nsecond@example.com\n"})

    assert GitHistory(runner=runner).first_author_email("a.md") == ""


def test_commit_without_author_email_is_counted():
    runner = FakeRunner({
        "--format=%ae\t%ad": "b@x.com\t2024-03-02T00:00:00Z\n\t2024-03-01T00:00:00Z\n",
    })

    assert GitHistory(runner=runner).commits("a.md") == [
        CommitRecord("b@x.com", "2024-03-02T00:00:00Z"),
        CommitRecord("", "2024-03-01T00:00:00Z"),
    ]

