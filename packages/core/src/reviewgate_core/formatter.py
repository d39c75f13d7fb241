"""Render a review submission as Markdown and as a YAML list entry."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import yaml

from reviewgate_core.errors import DataFileError
from reviewgate_core.models import FormattedReview, ReviewSubmission

REVIEWS_HEADER = "reviews:\n"
REVIEWS_KEY = "reviews"

_SCORE_MIN = 1
_SCORE_MAX = 5


class _DataFileDumper(yaml.SafeDumper):
    """Indents list items under their key and writes multi-line text as literal blocks."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


_OTHER_LINE_BREAKS = ("\x85", "\u2028", "\u2029")


def _represent_str(dumper, value: str):
    # The emitter falls back to a quoted scalar when a literal block cannot hold the text.
    if any(ch in value for ch in _OTHER_LINE_BREAKS):
        style = '"'
    elif "\n" in value:
        style = "|"
    else:
        style = None
    return dumper.represent_scalar("tag:yaml.org,2002:str", value, style=style)


_DataFileDumper.add_representer(str, _represent_str)


def parse_score(value) -> float | None:
    """Return ``value`` as a finite float, or None when it is absent or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        # float() accepts digit separators, plain decimal notation does not.
        if "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def clamp_score(value: float) -> float:
    return min(max(_SCORE_MIN, value), _SCORE_MAX)


def clamped_score(value) -> float | None:
    number = parse_score(value)
    return None if number is None else clamp_score(number)


def format_number(value: float) -> str:
    """``4.0`` → ``"4"``, ``3.5`` → ``"3.5"``."""
    return str(int(value)) if value.is_integer() else repr(value)


def _yaml_number(value: float) -> int | float:
    return int(value) if value.is_integer() else value


def course_slug(course: str) -> str:
    return course.lower().replace(" ", "")


def data_file_path(course: str, data_dir: str) -> str:
    return f"{data_dir.rstrip('/')}/{course_slug(course)}.yaml"


def build_title(submission: ReviewSubmission) -> str:
    return f"New review for {submission.course} by {submission.user}"


def build_record(submission: ReviewSubmission, now: datetime) -> dict:
    """The review as it is stored in the data file.

    difficulty and quality are kept only when their clamped value is truthy.
    """
    record = {
        "author": submission.user,
        "authorLink": submission.reference,
        "date": now.astimezone(timezone.utc).date(),
        "review": submission.review,
    }
    difficulty = clamped_score(submission.difficulty)
    if difficulty:
        record["difficulty"] = _yaml_number(difficulty)
    quality = clamped_score(submission.quality)
    if quality:
        record["quality"] = _yaml_number(quality)
    record["sessionTaken"] = submission.session_taken
    return record


def dump_data_file(data: dict) -> str:
    return yaml.dump(
        data,
        Dumper=_DataFileDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )


def build_entry(submission: ReviewSubmission, now: datetime) -> str:
    """Build one ``reviews:`` list entry, indented as it appears in the data file."""
    dumped = dump_data_file({REVIEWS_KEY: [build_record(submission, now)]})
    return dumped[len(REVIEWS_HEADER):]


def build_quote(submission: ReviewSubmission, now: datetime) -> str:
    """The quoted Markdown review with scores and a citation line."""
    lines = [f"> {line}" if line else ">" for line in submission.review.split("\n")]
    lines.append(">")

    difficulty = clamped_score(submission.difficulty)
    if difficulty is not None:
        lines.append(f"> Difficulty: {format_number(difficulty)}/5")
    quality = clamped_score(submission.quality)
    if quality is not None:
        lines.append(f"> Quality: {format_number(quality)}/5")

    cited_on = now.astimezone(timezone.utc).strftime("%b %d %Y")
    lines.append(f'> <cite><a href="{submission.reference}">{submission.user}</a>, {cited_on}</cite>')
    return "\n".join(lines)


def _session_note(submission: ReviewSubmission) -> str:
    session = submission.session_taken or "an unspecified session"
    return f"Course taken in session {session}."


def format_review(submission: ReviewSubmission, attribution: str, now: datetime | None = None) -> FormattedReview:
    """Produce the title, pull request body, data file record and issue body for a submission."""
    now = now or datetime.now(timezone.utc)
    quote = build_quote(submission, now)
    entry = build_entry(submission, now)
    note = _session_note(submission)

    body = "\n".join(
        [
            quote,
            "",
            note,
            "",
            "<details><summary>YAML entry</summary>",
            "",
            "```yaml",
            entry.rstrip("\n"),
            "```",
            "",
            "</details>",
            "",
            attribution,
        ]
    )
    issue_body = "\n".join([quote, "", note, "", attribution])
    return FormattedReview(
        title=build_title(submission),
        body=body,
        entry=entry,
        record=build_record(submission, now),
        issue_body=issue_body,
    )


def load_reviews(existing: str | None) -> tuple[list, dict]:
    """Parse a data file into ``(reviews, other_top_level_keys)``.

    An empty or missing file has no reviews. Anything that is not a mapping
    with a ``reviews`` list raises DataFileError rather than being overwritten.
    """
    if not existing or not existing.strip():
        return [], {}
    try:
        data = yaml.safe_load(existing.lstrip("\ufeff"))
    except yaml.YAMLError as e:
        raise DataFileError(f"existing data file is not valid YAML: {e}") from e
    if data is None:
        return [], {}
    if not isinstance(data, dict):
        raise DataFileError("existing data file is not a mapping")
    rest = {k: v for k, v in data.items() if k != REVIEWS_KEY}
    reviews = data.get(REVIEWS_KEY)
    if reviews is None:
        return [], rest
    if not isinstance(reviews, list):
        raise DataFileError(f"'{REVIEWS_KEY}' in existing data file is not a list")
    return reviews, rest


def prepend_entry(existing: str | None, record: dict) -> str:
    """Compose the data file: header, the new record, then any previous records."""
    reviews, rest = load_reviews(existing)
    return dump_data_file({REVIEWS_KEY: [record, *reviews], **rest})
