"""Serializer helpers for API responses."""

from __future__ import annotations

from web.models import Channel, Video



def channel_to_dict(channel: Channel) -> dict:
    return {
        "id": channel.id,
        "url": channel.url,
        "handle": channel.handle,
        "name": channel.name,
        "description": channel.description,
        "profile_image": channel.profile_image,
        "banner_img": channel.banner_img,
        "subscribers": channel.subscribers,
        "views": channel.views,
        "videos_count": channel.videos_count,
        "created_date": channel.created_date,
        "location": channel.location,
        "created_at": channel.created_at.isoformat() if channel.created_at else None,
        "updated_at": channel.updated_at.isoformat() if channel.updated_at else None,
        "videos_synced_at": channel.videos_synced_at.isoformat() if channel.videos_synced_at else None,
    }



def video_to_dict(video: Video) -> dict:
    return {
        "id": video.id,
        "url": video.url,
        "title": video.title,
        "description": video.description,
        "likes": video.likes,
        "views": video.views,
        "comments": video.comments,
        "published_at": video.published_at,
        "preview_image": video.preview_image,
        "duration": video.duration,
        "youtuber_id": video.youtuber_id,
        "created_at": video.created_at.isoformat() if video.created_at else None,
        "updated_at": video.updated_at.isoformat() if video.updated_at else None,
    }
