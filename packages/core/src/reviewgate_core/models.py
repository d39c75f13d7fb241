"""Request-scoped data models.

Every object here is built fresh for a single submission and never mutated
after construction. Nothing is persisted outside the target repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field


def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _raw_number(value):
    # JSON numbers are kept as-is, strings are left for the formatter to parse.
    if isinstance(value, bool):
        return None
    if value is None or isinstance(value, (int, float)):
        return value
    return _text(value)


@dataclass(frozen=True)
class ReviewSubmission:
    """The ``details`` object of an inbound submission."""

    course: str
    user: str
    review: str = ""
    reference: str = ""
    difficulty: str | float | None = None
    quality: str | float | None = None
    session_taken: str = ""

    @classmethod
    def from_payload(cls, details: dict) -> ReviewSubmission:
        """Build a submission from the decoded ``details`` object.

        Absent fields fall back to empty values instead of raising. ``overall``
        is accepted as an alias for ``quality``.
        """
        quality = details.get("quality")
        if quality is None:
            quality = details.get("overall")
        return cls(
            course=_text(details.get("course")),
            user=_text(details.get("user")),
            review=_text(details.get("review")),
            reference=_text(details.get("reference")),
            difficulty=_raw_number(details.get("difficulty")),
            quality=_raw_number(quality),
            session_taken=_text(details.get("sessionTaken")),
        )


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FormattedReview:
    """Everything the publisher needs to write one review."""

    title: str
    body: str
    entry: str  # YAML list entry, indented for the ``reviews:`` list
    record: dict
    issue_body: str


@dataclass(frozen=True)
class BranchChange:
    branch_name: str
    base_sha: str
    file_path: str
    file_content_after: str
    file_content_before: str | None = None
    file_sha: str | None = None  # blob SHA of the existing file; required to update in place


@dataclass(frozen=True)
class PullRequestRecord:
    title: str
    body: str
    head_branch: str
    base_branch: str
    labels: tuple[str, ...] = ()
    reviewers: tuple[str, ...] = ()
    team_reviewers: tuple[str, ...] = ()


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a successful publish. Only ``url`` is returned to the caller."""

    url: str
    number: int
    kind: str  # "pull_request" | "issue"
    branch: str | None = None
    path: str | None = None
