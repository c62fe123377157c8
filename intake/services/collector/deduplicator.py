"""Content deduplication service.

Identity is a normalized URL (primary) plus a fingerprint over the
normalized title and source (secondary), so the same item fetched with
different tracking parameters or mirrored at another URL is caught.

Two passes run in order:
1. Within the batch: first occurrence wins.
2. Against the store's queue and production identity keys.
"""

import hashlib
import re
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Generic, TypeVar
from urllib.parse import parse_qsl, urlencode, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from intake.config.content import DedupConfig
from intake.core.logging import get_logger
from intake.services.collector.base import ContentItem
from intake.services.store.base import IdentityIndex

logger = get_logger(__name__)

ItemT = TypeVar("ItemT", bound=ContentItem)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_url(url: str, tracking_params: Iterable[str] = ()) -> str:
    """Normalize a URL into an identity key.

    Lower-cases the URL, drops the scheme, `www.`, the fragment, the
    trailing slash and every tracking parameter, and sorts what is left of
    the query string.

    Args:
        url: URL to normalize
        tracking_params: Query parameter names to drop

    Returns:
        Normalized URL key (empty string for an empty URL)
    """
    url = url.strip().lower()
    if not url:
        return ""
    if "://" not in url:
        url = f"http://{url}"

    parts = urlsplit(url)
    host = parts.netloc.removeprefix("www.")
    path = parts.path.rstrip("/")
    drop = set(tracking_params)
    query = sorted(
        (k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in drop
    )

    key = f"{host}{path}"
    if query:
        key = f"{key}?{urlencode(query)}"
    return key


def content_fingerprint(title: str, source: str) -> str:
    """Hash a normalized title together with its source.

    Args:
        title: Item title
        source: Source name

    Returns:
        SHA-256 hex digest
    """
    normalized = _NON_ALNUM.sub(" ", title.lower()).strip()
    return hashlib.sha256(f"{normalized}|{source.strip().lower()}".encode()).hexdigest()


class DedupReason(str, Enum):
    """Reason for duplicate detection."""

    BATCH_URL = "batch_url"
    BATCH_FINGERPRINT = "batch_fingerprint"
    STORED_URL = "stored_url"
    STORED_FINGERPRINT = "stored_fingerprint"


class ItemIdentity(BaseModel):
    """Identity keys of one item."""

    model_config = ConfigDict(frozen=True)

    url_key: str
    fingerprint: str

    def keys(self) -> list[str]:
        """Namespaced keys used for in-run tracking."""
        keys = [f"fp:{self.fingerprint}"]
        if self.url_key:
            keys.insert(0, f"url:{self.url_key}")
        return keys


class DuplicateOutcome(BaseModel, Generic[ItemT]):
    """A duplicate found during partitioning.

    Attributes:
        item: The duplicate item
        reason: Which identity key matched
        key: Matching key value
    """

    item: ItemT
    reason: DedupReason
    key: str


class DedupPartition(BaseModel, Generic[ItemT]):
    """Items split into unique and duplicate sets.

    Attributes:
        unique: Items seen for the first time, in input order
        duplicates: Items that matched an earlier or stored identity
        outcomes: One DuplicateOutcome per duplicate
    """

    unique: list[ItemT] = Field(default_factory=list)
    duplicates: list[ItemT] = Field(default_factory=list)
    outcomes: list[DuplicateOutcome[ItemT]] = Field(default_factory=list)


class ContentDeduplicator:
    """Partitions batches into unique and duplicate items.

    Attributes:
        index: Store-backed identity lookup (optional)
        config: Deduplication configuration
    """

    def __init__(
        self,
        index: IdentityIndex | None = None,
        config: DedupConfig | None = None,
    ):
        """Initialize deduplicator.

        Args:
            index: Identity index; without one only the in-batch pass runs
            config: Deduplication configuration (uses defaults if not provided)
        """
        self.index = index
        self.config = config or DedupConfig()

    def identity(self, item: ContentItem) -> ItemIdentity:
        """Compute the identity keys of an item.

        Args:
            item: Item to identify

        Returns:
            ItemIdentity with URL key and fingerprint
        """
        return ItemIdentity(
            url_key=normalize_url(item.url or "", self.config.tracking_params),
            fingerprint=content_fingerprint(item.title, item.source),
        )

    async def filter_duplicates(
        self,
        items: Sequence[ItemT],
        seen: set[str] | None = None,
    ) -> DedupPartition[ItemT]:
        """Split items into unique and duplicate sets.

        Args:
            items: Items in stable order
            seen: Identity keys accepted earlier in the same run; updated in
                place with the keys of the items found unique here

        Returns:
            DedupPartition
        """
        seen = seen if seen is not None else set()
        partition: DedupPartition[ItemT] = DedupPartition()

        batch_unique: list[tuple[ItemT, ItemIdentity]] = []
        batch_keys = set(seen)
        for item in items:
            identity = self.identity(item)
            outcome = self._match_batch(item, identity, batch_keys)
            if outcome is not None:
                self._add_duplicate(partition, outcome)
                continue
            batch_keys.update(self._tracked_keys(identity))
            batch_unique.append((item, identity))

        stored_urls, stored_fingerprints = await self._lookup_stored(
            [identity for _, identity in batch_unique]
        )

        for item, identity in batch_unique:
            if identity.url_key and identity.url_key in stored_urls:
                self._add_duplicate(
                    partition,
                    DuplicateOutcome(
                        item=item, reason=DedupReason.STORED_URL, key=identity.url_key
                    ),
                )
            elif self.config.use_fingerprint and identity.fingerprint in stored_fingerprints:
                self._add_duplicate(
                    partition,
                    DuplicateOutcome(
                        item=item, reason=DedupReason.STORED_FINGERPRINT, key=identity.fingerprint
                    ),
                )
            else:
                partition.unique.append(item)
                seen.update(self._tracked_keys(identity))

        logger.debug(
            "Deduplication complete",
            total=len(items),
            unique=len(partition.unique),
            duplicates=len(partition.duplicates),
        )
        return partition

    def _tracked_keys(self, identity: ItemIdentity) -> list[str]:
        keys = identity.keys()
        if not self.config.use_fingerprint:
            keys = [k for k in keys if not k.startswith("fp:")]
        return keys

    def _match_batch(
        self, item: ItemT, identity: ItemIdentity, batch_keys: set[str]
    ) -> DuplicateOutcome[ItemT] | None:
        if identity.url_key and f"url:{identity.url_key}" in batch_keys:
            return DuplicateOutcome(item=item, reason=DedupReason.BATCH_URL, key=identity.url_key)
        if self.config.use_fingerprint and f"fp:{identity.fingerprint}" in batch_keys:
            return DuplicateOutcome(
                item=item, reason=DedupReason.BATCH_FINGERPRINT, key=identity.fingerprint
            )
        return None

    async def _lookup_stored(self, identities: list[ItemIdentity]) -> tuple[set[str], set[str]]:
        if self.index is None or not identities:
            return set(), set()
        url_keys = {i.url_key for i in identities if i.url_key}
        fingerprints = {i.fingerprint for i in identities} if self.config.use_fingerprint else set()
        return await self.index.existing_identities(url_keys, fingerprints)

    @staticmethod
    def _add_duplicate(partition: DedupPartition[ItemT], outcome: DuplicateOutcome[ItemT]) -> None:
        logger.info(
            "Duplicate detected",
            title=outcome.item.title[:50],
            source=outcome.item.source,
            reason=outcome.reason.value,
        )
        partition.duplicates.append(outcome.item)
        partition.outcomes.append(outcome)


__all__ = [
    "ContentDeduplicator",
    "DedupPartition",
    "DedupReason",
    "DuplicateOutcome",
    "ItemIdentity",
    "content_fingerprint",
    "normalize_url",
]
