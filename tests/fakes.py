import subprocess

from github_identity import IdentityRecord, Lookup


class FakeRunner:
    """Stands in for subprocess.run, answering by the --format option."""

    def __init__(self, outputs=None, returncode=0):
        self.outputs = outputs or {}
        self.returncode = returncode
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append((args, kwargs))
        fmt = next(a for a in args if a.startswith("--format="))
        key = fmt
        if "--reverse" in args:
            key = "reverse:" + fmt
        return subprocess.CompletedProcess(args, self.returncode, stdout=self.outputs.get(key, ""), stderr="")


class FakeResolver:
    """Resolves emails from a fixed table and records every lookup."""

    def __init__(self, users, failures=()):
        self.users = users
        self.failures = set(failures)
        self.calls = []

    def resolve(self, email):
        self.calls.append(email)
        if email in self.failures:
            return Lookup.transport_failure(email, "GitHub API returned 502")
        if email not in self.users:
            return Lookup.not_found(email)
        name = self.users[email]
        return Lookup.found(email, identity(name))


def identity(name, numeric_id=None):
    return IdentityRecord(
        username=name,
        avatar_url=f"https://avatars.githubusercontent.com/{name}",
        profile_url=f"https://github.com/{name}",
        numeric_id=numeric_id if numeric_id is not None else sum(map(ord, name)),
    )
