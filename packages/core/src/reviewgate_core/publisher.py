"""Publish a formatted review to GitHub.

Pull request mode runs a strictly ordered chain of remote calls:

    base SHA → new branch → read data file → write data file
             → open pull request → add labels → request reviewers

Issue mode opens a single issue instead. Nothing is retried; the first
failing step raises a PublishError naming that step.
"""

from __future__ import annotations

import logging
import secrets
from contextlib import contextmanager
from datetime import datetime, timezone

from reviewgate_core.config import RelayConfig
from reviewgate_core.errors import PublishError, classify_github_error
from reviewgate_core.formatter import data_file_path, format_review, prepend_entry
from reviewgate_core.gh.repository import (
    add_labels,
    create_branch,
    delete_branch,
    get_branch_sha,
    get_file,
    get_repo,
    open_issue,
    open_pull_request,
    request_reviewers,
    write_file,
)
from reviewgate_core.models import BranchChange, PublishResult, PullRequestRecord, ReviewSubmission

logger = logging.getLogger(__name__)


@contextmanager
def _step(name: str):
    logger.debug("publish step: %s", name)
    try:
        yield
    except Exception as e:
        raise classify_github_error(e, name) from e


def new_branch_name(prefix: str, now: datetime) -> str:
    millis = int(now.timestamp() * 1000)
    return f"{prefix}-{millis}-{secrets.token_hex(3)}"


class Publisher:
    """Turns a ReviewSubmission into a pull request (or issue) on the configured repo."""

    def __init__(self, config: RelayConfig, repo_obj=None):
        self._config = config
        self._repo = repo_obj

    @property
    def repo(self):
        if self._repo is None:
            self._repo = get_repo(self._config.repo_full_name, token=self._config.github_token)
        return self._repo

    def publish(self, submission: ReviewSubmission, now: datetime | None = None) -> PublishResult:
        now = now or datetime.now(timezone.utc)
        if self._config.mode == "issue":
            return self.publish_issue(submission, now)
        return self.publish_pull_request(submission, now)

    def publish_issue(self, submission: ReviewSubmission, now: datetime) -> PublishResult:
        formatted = format_review(submission, self._config.attribution, now)
        with _step("create_issue"):
            issue = open_issue(self.repo, formatted.title, formatted.issue_body, self._config.labels)
        logger.info("Opened issue #%s for %s: %s", issue.number, submission.course, issue.html_url)
        return PublishResult(url=issue.html_url, number=issue.number, kind="issue")

    def prepare_change(self, submission: ReviewSubmission, record: dict, now: datetime) -> BranchChange:
        """Resolve the base SHA, create the branch and compose the new file content."""
        cfg = self._config
        with _step("resolve_base"):
            base_sha = get_branch_sha(self.repo, cfg.base_branch)

        branch = new_branch_name(cfg.branch_prefix, now)
        with _step("create_branch"):
            create_branch(self.repo, branch, base_sha)

        path = data_file_path(submission.course, cfg.data_dir)
        try:
            with _step("read_file"):
                existing = get_file(self.repo, path, ref=branch)
            file_sha, before = existing if existing is not None else (None, None)
            with _step("compose_file"):
                after = prepend_entry(before, record)
        except PublishError:
            self._discard_branch(branch)
            raise

        return BranchChange(
            branch_name=branch,
            base_sha=base_sha,
            file_path=path,
            file_content_before=before,
            file_content_after=after,
            file_sha=file_sha,
        )

    def publish_pull_request(self, submission: ReviewSubmission, now: datetime) -> PublishResult:
        cfg = self._config
        formatted = format_review(submission, cfg.attribution, now)
        change = self.prepare_change(submission, formatted.record, now)

        record = PullRequestRecord(
            title=formatted.title,
            body=formatted.body,
            head_branch=change.branch_name,
            base_branch=cfg.base_branch,
            labels=cfg.labels,
            reviewers=cfg.reviewers,
            team_reviewers=cfg.team_reviewers,
        )

        try:
            with _step("write_file"):
                write_file(
                    self.repo,
                    change.file_path,
                    f"Add review for {submission.course}",
                    change.file_content_after,
                    branch=change.branch_name,
                    sha=change.file_sha,
                )
            with _step("create_pull_request"):
                pr = open_pull_request(self.repo, record.title, record.body, record.head_branch, record.base_branch)
        except PublishError:
            self._discard_branch(change.branch_name)
            raise

        # The pull request exists from here on; later failures leave it in place.
        if record.labels:
            with _step("add_labels"):
                add_labels(pr, record.labels)
        if record.reviewers or record.team_reviewers:
            with _step("request_reviewers"):
                request_reviewers(pr, record.reviewers, record.team_reviewers)

        logger.info("Opened pull request #%s for %s: %s", pr.number, submission.course, pr.html_url)
        return PublishResult(
            url=pr.html_url,
            number=pr.number,
            kind="pull_request",
            branch=change.branch_name,
            path=change.file_path,
        )

    def _discard_branch(self, branch: str) -> None:
        if not self._config.cleanup_orphan_branches:
            logger.warning("Leaving orphaned branch %s in place", branch)
            return
        try:
            delete_branch(self.repo, branch)
            logger.info("Deleted orphaned branch %s", branch)
        except Exception as e:
            logger.warning("Could not delete orphaned branch %s: %s", branch, e)
