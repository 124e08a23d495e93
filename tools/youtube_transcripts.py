"""Transcript provider backed by youtube-transcript-api."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from youtube_transcript_api import YouTubeTranscriptApi

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES = ("en",)


def fetch_transcript_fragments(video_id: str, languages: Sequence[str] = DEFAULT_LANGUAGES) -> List[Dict]:
    """Return ordered caption fragments (``text``, ``start``, ``duration``) for a video."""
    api = YouTubeTranscriptApi()
    fetched = api.fetch(video_id, languages=list(languages))
    return fetched.to_raw_data()


def join_transcript(fragments) -> str:
    return " ".join(fragment["text"] for fragment in fragments)


def fetch_transcript_text(video_id: str, fetcher=fetch_transcript_fragments) -> Optional[str]:
    """Fetch and join a transcript; ``None`` when captions cannot be retrieved."""
    try:
        fragments = fetcher(video_id)
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Transcript fetch failed for %s: %s", video_id, exc)
        return None
    if fragments is None:
        return None
    return join_transcript(fragments)
