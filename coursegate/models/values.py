"""
Value objects stored inside JSON columns.

Tags, enrollment questions, form answers and message attachments are kept as
JSON in the database but handled as typed objects everywhere else. The
conversion happens in ``coursegate.models.types.JSONValue``.
"""

import re
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from coursegate.utils.settings import MAX_COURSE_TAGS

_SLUG_RE = re.compile(r"[^a-z0-9]+")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")

TAG_LABEL_MAX = 40
ANSWER_MAX = 1000


class CourseTag(BaseModel):
    label: str
    slug: str


class EnrollQuestion(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    label: str = Field(..., min_length=1, max_length=200)
    placeholder: Optional[str] = Field(None, max_length=200)
    type: str = "text"


class MessageAttachment(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)
    name: Optional[str] = Field(None, max_length=200)


DEFAULT_ENROLL_QUESTIONS: List[EnrollQuestion] = [
    EnrollQuestion(
        id="intent",
        label="What do you hope to get out of this course?",
        placeholder="Share your goals",
        type="textarea",
    ),
    EnrollQuestion(
        id="experience",
        label="How familiar are you with the topic?",
        placeholder="Beginner, some experience, ...",
    ),
]

JOIN_CODE_DEFAULT_ANSWER = "Joined with the course code"


def slugify(label: str) -> str:
    return _SLUG_RE.sub("-", label.lower().strip()).strip("-")


def normalize_tags(labels: Iterable[str]) -> List[CourseTag]:
    """Clean raw labels into at most ``MAX_COURSE_TAGS`` unique tags.

    Whitespace is collapsed, over-long labels are cut, labels that slugify to
    nothing are dropped and duplicates are detected by slug (first wins).
    """
    tags: List[CourseTag] = []
    seen = set()
    for raw in labels:
        if not isinstance(raw, str):
            continue
        label = " ".join(raw.split())[:TAG_LABEL_MAX]
        slug = slugify(label)
        if not slug or slug in seen:
            continue
        seen.add(slug)
        tags.append(CourseTag(label=label, slug=slug))
        if len(tags) == MAX_COURSE_TAGS:
            break
    return tags


def questions_or_default(
    questions: Optional[List[EnrollQuestion]],
) -> List[EnrollQuestion]:
    return list(questions) if questions else list(DEFAULT_ENROLL_QUESTIONS)


def recognized_answers(
    answers: Optional[Dict[str, str]], questions: List[EnrollQuestion]
) -> Dict[str, str]:
    """Keep non-blank answers whose keys match a configured question."""
    if not answers:
        return {}
    known = {q.id for q in questions}
    cleaned: Dict[str, str] = {}
    for key, value in answers.items():
        if key not in known or value is None:
            continue
        text = str(value).strip()[:ANSWER_MAX]
        if text:
            cleaned[key] = text
    return cleaned


def normalize_meeting_url(url: str) -> str:
    """Ensure a meeting URL carries a scheme; bare hosts get ``https://``."""
    value = (url or "").strip()
    if not value:
        return ""
    if _SCHEME_RE.match(value):
        return value
    return f"https://{value.lstrip('/')}"
