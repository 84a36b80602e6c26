import re
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator

from article_api.models import Article

# date-time from RFC 3339 section 5.6
_RFC3339_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt]"
    r"(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 date-time into an aware datetime.

    Only the strict profile is accepted: a ``T`` separator and an explicit
    ``Z`` or ``±HH:MM`` offset.  Fractional seconds beyond microseconds
    are truncated.  The instant must also exist in UTC, the form it is
    stored in.
    """
    match = _RFC3339_RE.match(value)
    if match is None:
        raise ValueError("must be an RFC 3339 date-time, e.g. 2024-05-01T10:00:00Z")

    text = f"{match['date']}T{match['time']}"
    if match["fraction"]:
        text += "." + match["fraction"][:6].ljust(6, "0")
    offset = match["offset"]
    text += "+00:00" if offset in ("Z", "z") else offset

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"must be an RFC 3339 date-time: {exc}") from None

    # Stored as UTC: 9999-12-31T23:59:59-01:00 would land in year 10000.
    try:
        parsed.astimezone(timezone.utc)
    except OverflowError:
        raise ValueError("must fall between years 1 and 9999 in UTC") from None
    return parsed


# --- Article requests ---

class ArticleBase(BaseModel):
    title: str
    content: str
    author: str
    published_at: datetime | None = None

    @field_validator("title", "content", "author")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("published_at", mode="before")
    @classmethod
    def parse_published_at(cls, value):
        # An empty string means "not published", same as leaving it out.
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValueError("must be an RFC 3339 date-time string")
        return parse_rfc3339(value)

    def to_article(self, article_id: int | None = None) -> Article:
        """Build the entity to hand to the store."""
        article = Article(
            title=self.title,
            content=self.content,
            author=self.author,
            published_at=self.published_at,
        )
        if article_id is not None:
            article.id = article_id
        return article


class ArticleCreate(ArticleBase):
    pass


class ArticleUpdate(ArticleBase):
    """Full replacement of the writable fields; every field is required again."""


# --- Article responses ---

class ArticleResponse(BaseModel):
    id: int
    title: str
    content: str
    author: str
    published_at: datetime | None = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
