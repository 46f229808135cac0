"""Repository for the settings singleton and per-folder overrides."""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models import FolderSyndication, SyndicationSettings
from ..models.syndication import SETTINGS_ROW_ID


class SyndicationRepository:
    """Data access layer for syndication configuration."""

    def __init__(self, db: Session):
        self.db = db

    # --- Global settings ---

    def get_settings(self) -> Optional[SyndicationSettings]:
        return self.db.query(SyndicationSettings).filter(
            SyndicationSettings.id == SETTINGS_ROW_ID
        ).first()

    def create_default_settings(self) -> SyndicationSettings:
        row = SyndicationSettings(id=SETTINGS_ROW_ID)
        self.db.add(row)
        self.db.flush()
        return row

    def get_or_create_settings(self) -> SyndicationSettings:
        """The settings row, created with defaults on first access."""
        return self.get_settings() or self.create_default_settings()

    # --- Folder overrides ---

    def get_folder_override(self, folder_id: str) -> Optional[FolderSyndication]:
        return self.db.query(FolderSyndication).filter(
            FolderSyndication.folder_id == folder_id
        ).first()

    def upsert_folder_override(self, folder_id: str, values: Dict[str, Any]) -> FolderSyndication:
        """Create the override row for *folder_id* or update it in place."""
        row = self.get_folder_override(folder_id)
        if row is None:
            row = FolderSyndication(folder_id=folder_id)
            self.db.add(row)
        for key, value in values.items():
            setattr(row, key, value)
        self.db.flush()
        return row

    def delete_folder_override(self, folder_id: str) -> bool:
        deleted = self.db.query(FolderSyndication).filter(
            FolderSyndication.folder_id == folder_id
        ).delete(synchronize_session=False)
        return deleted > 0

    def delete_all_folder_overrides(self) -> int:
        return self.db.query(FolderSyndication).delete(synchronize_session=False)
