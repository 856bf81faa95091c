"""Theme draft/publish lifecycle."""

from typing import Any, Mapping

from ..core.errors import NotFoundError
from ..core.hash import content_checksum
from ..core.logging_config import get_logger
from ..styles import DEFAULT_THEME, validate_theme
from .models import DocumentStatus, ThemeRecord
from .store import DocumentStore

logger = get_logger(__name__)


class ThemeService:
    """Theme variables per store, with the same atomic publish as documents."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def save_theme_draft(self, store_id: str, variables: Mapping[str, Any]) -> ThemeRecord:
        """
        Validate and store the DRAFT theme.

        Raises:
            ValidationError: Bad token name or value
        """
        clean = validate_theme(variables)
        record = self.store.upsert_theme(
            ThemeRecord(
                store_id=store_id,
                status=DocumentStatus.DRAFT,
                vars=clean,
                checksum=content_checksum(clean),
            )
        )
        logger.info("theme_draft_saved", store_id=store_id, tokens=len(clean))
        return record

    def publish_theme(self, store_id: str) -> ThemeRecord:
        """
        Copy the DRAFT theme onto PUBLISHED in one transaction.

        Raises:
            NotFoundError: No draft theme
        """
        with self.store.transaction():
            draft = self.store.get_theme(store_id, DocumentStatus.DRAFT)
            if draft is None:
                raise NotFoundError("theme draft", store_id)
            published = self.store.upsert_theme(
                ThemeRecord(
                    store_id=store_id,
                    status=DocumentStatus.PUBLISHED,
                    vars=draft.vars,
                    checksum=draft.checksum,
                )
            )
        logger.info("theme_published", store_id=store_id, checksum=published.checksum)
        return published

    def get_theme(self, store_id: str, status: DocumentStatus = DocumentStatus.PUBLISHED) -> ThemeRecord | None:
        return self.store.get_theme(store_id, DocumentStatus(status))

    def get_theme_vars(self, store_id: str, status: DocumentStatus = DocumentStatus.PUBLISHED) -> dict[str, str]:
        """Theme variables, falling back to the default theme."""
        record = self.get_theme(store_id, status)
        return dict(record.vars) if record is not None else dict(DEFAULT_THEME)

    def seed_default_theme(self, store_id: str) -> None:
        """Create DRAFT and PUBLISHED default themes where absent."""
        with self.store.transaction():
            for status in (DocumentStatus.DRAFT, DocumentStatus.PUBLISHED):
                if self.store.get_theme(store_id, status) is None:
                    self.store.upsert_theme(
                        ThemeRecord(
                            store_id=store_id,
                            status=status,
                            vars=dict(DEFAULT_THEME),
                            checksum=content_checksum(DEFAULT_THEME),
                        )
                    )
