"""Retention cleanup for stored video rows."""

from __future__ import annotations

import logging

from web.models import Video

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500



def delete_video_records(db_session, count: int = DEFAULT_BATCH_SIZE) -> int:
    """Delete up to ``count`` stored videos, oldest rows first. Returns the number deleted."""
    if count <= 0:
        return 0

    video_ids = [
        row.id
        for row in db_session.query(Video.id)
        .order_by(Video.created_at.asc(), Video.id.asc())
        .limit(count)
        .all()
    ]
    if not video_ids:
        logger.info("No videos found to delete")
        return 0

    db_session.query(Video).filter(Video.id.in_(video_ids)).delete(synchronize_session=False)
    db_session.commit()
    logger.info("Deleted %d video records", len(video_ids))
    return len(video_ids)
