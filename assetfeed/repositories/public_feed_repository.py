"""Repository for named public feed configurations."""

from typing import List, Optional

from ..exceptions import FeedNotFoundError
from ..models import PublicFeed
from .base import BaseRepository


class PublicFeedRepository(BaseRepository[PublicFeed]):
    """CRUD for the ``public_feeds`` table."""

    model_class = PublicFeed
    not_found_error = FeedNotFoundError

    def create(self, feed: PublicFeed) -> PublicFeed:
        self.db.add(feed)
        self.db.flush()
        return feed

    def get_by_slug(self, slug: str) -> Optional[PublicFeed]:
        return self.db.query(PublicFeed).filter(PublicFeed.slug == slug).first()

    def get_active_by_slug(self, slug: str) -> Optional[PublicFeed]:
        return (
            self.db.query(PublicFeed)
            .filter(PublicFeed.slug == slug)
            .filter(PublicFeed.is_active.is_(True))
            .first()
        )

    def get_all(self) -> List[PublicFeed]:
        return self.db.query(PublicFeed).order_by(
            PublicFeed.created_at.desc(), PublicFeed.id
        ).all()

    def delete(self, feed: PublicFeed) -> None:
        self.db.delete(feed)
        self.db.flush()

    def delete_all(self) -> int:
        return self.db.query(PublicFeed).delete(synchronize_session=False)
