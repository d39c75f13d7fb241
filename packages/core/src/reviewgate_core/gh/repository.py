from __future__ import annotations

from github import Github, UnknownObjectException


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_branch_sha(repo, branch: str) -> str:
    """Return the SHA of the tip commit of ``branch``."""
    return repo.get_git_ref(f"heads/{branch}").object.sha


def create_branch(repo, branch: str, sha: str):
    return repo.create_git_ref(ref=f"refs/heads/{branch}", sha=sha)


def delete_branch(repo, branch: str) -> None:
    repo.get_git_ref(f"heads/{branch}").delete()


def get_file(repo, path: str, ref: str) -> tuple[str, str] | None:
    """Return ``(blob_sha, decoded_text)`` for a file, or None if it does not exist."""
    try:
        content = repo.get_contents(path, ref=ref)
    except UnknownObjectException:
        return None
    if isinstance(content, list):
        raise IsADirectoryError(path)
    return content.sha, content.decoded_content.decode("utf-8")


def write_file(repo, path: str, message: str, content: str, branch: str, sha: str | None = None):
    """Create ``path`` on ``branch``, or update it in place when ``sha`` is given."""
    if sha:
        return repo.update_file(path, message, content, sha, branch=branch)
    return repo.create_file(path, message, content, branch=branch)


def open_pull_request(repo, title: str, body: str, head: str, base: str):
    return repo.create_pull(title=title, body=body, head=head, base=base)


def add_labels(issue_or_pr, labels) -> None:
    issue_or_pr.add_to_labels(*labels)


def request_reviewers(pr, reviewers, team_reviewers) -> None:
    pr.create_review_request(reviewers=list(reviewers), team_reviewers=list(team_reviewers))


def open_issue(repo, title: str, body: str, labels):
    return repo.create_issue(title=title, body=body, labels=list(labels))
