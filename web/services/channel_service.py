"""Channel and video sync between the YouTube fetcher and the stored rows."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from tools.video_metrics import parse_count
from web.models import Channel, Video

YOUTUBE_CHANNEL_PATTERNS = [
    re.compile(r"^https://(www\.)?youtube\.com/@[\w.-]+/?$", re.IGNORECASE),
    re.compile(r"^https://(www\.)?youtube\.com/channel/UC[\w-]+/?$", re.IGNORECASE),
    re.compile(r"^https://(www\.)?youtube\.com/c/[\w-]+/?$", re.IGNORECASE),
    re.compile(r"^https://(www\.)?youtube\.com/user/[\w-]+/?$", re.IGNORECASE),
]

CHANNEL_FIELDS = ("url", "handle", "name", "description", "profile_image", "banner_img", "created_date", "location")
VIDEO_FIELDS = ("url", "title", "description", "published_at", "preview_image")


def normalize_channel_url(channel_url: str) -> str:
    normalized = channel_url.strip()
    if normalized.startswith("http://"):
        normalized = "https://" + normalized[len("http://") :]
    return normalized.rstrip("/")



def validate_channel_url(channel_url: str) -> bool:
    normalized = normalize_channel_url(channel_url)
    return any(pattern.match(normalized) for pattern in YOUTUBE_CHANNEL_PATTERNS)



def is_stale(synced_at: Optional[datetime], refresh_interval_hours: int, now: Optional[datetime] = None) -> bool:
    """True when a row was never synced or its last sync is older than the refresh interval."""
    if synced_at is None:
        return True
    now = now or datetime.utcnow()
    return now - synced_at >= timedelta(hours=refresh_interval_hours)



def upsert_channel(db_session, channel_info: Dict, now: Optional[datetime] = None) -> Channel:
    now = now or datetime.utcnow()
    channel = db_session.get(Channel, channel_info["id"])
    if channel is None:
        channel = Channel(id=channel_info["id"], created_at=now)
        db_session.add(channel)

    for field in CHANNEL_FIELDS:
        setattr(channel, field, channel_info.get(field) or "")
    channel.subscribers = parse_count(channel_info.get("subscribers"))
    channel.views = parse_count(channel_info.get("views"))
    channel.videos_count = parse_count(channel_info.get("videos_count"))
    channel.updated_at = now

    db_session.commit()
    return channel



def upsert_videos(db_session, channel_id: str, rows: List[Dict], now: Optional[datetime] = None) -> int:
    """Insert or update fetched video rows; returns how many rows were written."""
    now = now or datetime.utcnow()
    written = 0
    for row in rows:
        video = db_session.get(Video, row["id"])
        if video is None:
            video = Video(id=row["id"], youtuber_id=channel_id, created_at=now)
            db_session.add(video)

        for field in VIDEO_FIELDS:
            setattr(video, field, row.get(field) or "")
        video.likes = parse_count(row.get("likes"))
        video.views = parse_count(row.get("views"))
        video.comments = parse_count(row.get("comments"))
        video.duration = parse_count(row.get("duration"))
        video.youtuber_id = channel_id
        video.updated_at = now
        written += 1

    db_session.commit()
    return written



def sync_channel(
    db_session,
    channel_url: str,
    fetcher,
    refresh_interval_hours: int,
    now: Optional[datetime] = None,
) -> Tuple[Channel, bool]:
    """
    Resolve a channel URL and store its metadata.

    Returns ``(channel, refreshed)``. A stored channel updated within the
    refresh interval is returned as-is without another metadata request.
    """
    normalized_url = normalize_channel_url(channel_url)
    if not validate_channel_url(normalized_url):
        raise ValueError(
            "Invalid channel URL format. Supported: https://youtube.com/@name, /channel/UC..., /c/name, /user/name"
        )

    channel_id = fetcher.extract_channel_id(normalized_url)
    channel = db_session.get(Channel, channel_id)
    if channel is not None and not is_stale(channel.updated_at, refresh_interval_hours, now):
        return channel, False

    channel_info = fetcher.fetch_channel_info(channel_id)
    return upsert_channel(db_session, channel_info, now), True



def sync_channel_videos(
    db_session,
    channel: Channel,
    fetcher,
    max_videos: int,
    refresh_interval_hours: int,
    force: bool = False,
    now: Optional[datetime] = None,
) -> Tuple[int, bool]:
    """
    Collect a channel's uploads and upsert them.

    Returns ``(rows_written, refreshed)``; nothing is fetched while the
    stored video set is fresh unless ``force`` is set.
    """
    if not force and not is_stale(channel.videos_synced_at, refresh_interval_hours, now):
        return 0, False

    now = now or datetime.utcnow()
    rows = fetcher.fetch_channel_videos(channel.id, max_videos)
    written = upsert_videos(db_session, channel.id, rows, now)

    channel.videos_synced_at = now
    db_session.add(channel)
    db_session.commit()
    return written, True



def load_video_rows(db_session, channel_id: str) -> List[Dict]:
    """Stored videos of one channel in the metrics input shape, newest first."""
    videos = (
        db_session.query(Video)
        .filter(Video.youtuber_id == channel_id)
        .order_by(Video.published_at.desc())
        .all()
    )
    return [video_to_row(video) for video in videos]



def video_to_row(video: Video) -> Dict:
    return {
        "id": video.id,
        "url": video.url,
        "title": video.title,
        "description": video.description,
        "likes": str(video.likes),
        "views": str(video.views),
        "comments": str(video.comments),
        "published_at": video.published_at,
        "preview_image": video.preview_image,
        "youtuber_id": video.youtuber_id,
        "duration": video.duration,
    }
