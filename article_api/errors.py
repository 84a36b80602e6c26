"""
Failure outcomes shared by the store and the request handler.

``NotFound`` is a value, not an exception: ``ArticleStore.update_by_id``
returns it next to the successful ``Article`` so callers have to branch on
it.  ``PersistenceError`` is raised for everything else that goes wrong
below the handler (query failures, lost connections, expired deadlines).
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class NotFound:
    """No article row matches ``article_id``."""

    article_id: int


class PersistenceError(Exception):
    """A store operation failed; the cause is chained as ``__cause__``."""
