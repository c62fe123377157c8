"""Staging writer.

Last integrity checkpoint before persistence: validates each accepted item
and inserts it into its category's review queue with status pending_review.
Each item is written independently; one failure never blocks the rest.
"""

from collections.abc import Sequence

from pydantic import BaseModel, Field

from intake.config.content import StagingConfig
from intake.core.exceptions import StorageConflictError, StorageError, ValidationError
from intake.core.logging import get_logger
from intake.models.base import ContentCategory
from intake.services.collector.base import ScoredItem
from intake.services.collector.deduplicator import ContentDeduplicator
from intake.services.review.transforms import queue_values
from intake.services.store.base import ContentStore

logger = get_logger(__name__)


class StagingResult(BaseModel):
    """Outcome of one staging call.

    Attributes:
        inserted: Inserted rows per category
        rejected: Items dropped by the staging gate
        skipped: Items already queued under the same (url, source)
        errors: Insert failures unrelated to uniqueness
    """

    inserted: dict[ContentCategory, int] = Field(default_factory=dict)
    rejected: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def stored(self) -> int:
        """Total rows inserted across categories."""
        return sum(self.inserted.values())


class StagingWriter:
    """Writes accepted items into the review queues."""

    def __init__(
        self,
        store: ContentStore,
        config: StagingConfig | None = None,
        deduplicator: ContentDeduplicator | None = None,
    ):
        """Initialize staging writer.

        Args:
            store: Persistent store
            config: Staging configuration (uses defaults if not provided)
            deduplicator: Used for identity keys (a store-less one if not provided)
        """
        self.store = store
        self.config = config or StagingConfig()
        self.deduplicator = deduplicator or ContentDeduplicator()

    def validate(self, item: ScoredItem, score_threshold: int) -> None:
        """Check that an item is a viable queue record.

        Args:
            item: Item to check
            score_threshold: Minimum score for persistence

        Raises:
            ValidationError: If a required field is missing or out of range
        """
        if not item.title:
            raise ValidationError("title", "Title is empty")
        if not item.url:
            raise ValidationError("url", "URL is empty")
        if item.score < score_threshold:
            raise ValidationError("score", f"Score {item.score} is below {score_threshold}")
        if len(item.description) < self.config.min_description_length:
            raise ValidationError(
                "description",
                f"Description shorter than {self.config.min_description_length} characters",
            )

    async def stage(self, items: Sequence[ScoredItem], score_threshold: int) -> StagingResult:
        """Insert items into their queue tables.

        Args:
            items: Accepted, unique items
            score_threshold: Minimum score for persistence

        Returns:
            StagingResult with counts per category and errors
        """
        result = StagingResult()

        for item in items:
            try:
                self.validate(item, score_threshold)
            except ValidationError as e:
                logger.debug("Item failed staging gate", title=item.title[:50], error=str(e))
                result.rejected += 1
                continue

            category = item.category
            values = queue_values(item, self.deduplicator.identity(item))
            try:
                await self.store.insert_queue_record(category, values)
            except StorageConflictError:
                logger.debug("Item already queued", url=item.url, source=item.source)
                result.skipped += 1
                continue
            except StorageError as e:
                logger.error(
                    "Failed to stage item",
                    title=item.title[:50],
                    category=category.value,
                    error=str(e),
                    exc_info=True,
                )
                result.errors.append(f"staging {category.value} '{item.title[:50]}': {e}")
                continue

            result.inserted[category] = result.inserted.get(category, 0) + 1

        logger.info(
            "Staging complete",
            stored=result.stored,
            rejected=result.rejected,
            skipped=result.skipped,
            errors=len(result.errors),
        )
        return result


__all__ = [
    "StagingResult",
    "StagingWriter",
]
