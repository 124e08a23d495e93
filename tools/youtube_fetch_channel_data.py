#!/usr/bin/env python3
"""
YouTube Channel Data Fetcher
Fetches channel metadata and video rows from YouTube Data API v3

Usage:
    python3 -m tools.youtube_fetch_channel_data "https://youtube.com/@channelname"
"""

import sys
import os
import json
import re
import time
from pathlib import Path
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_MAX_VIDEOS = 200
PAGE_SIZE = 50
ISO_DURATION_PATTERN = re.compile(r"P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?")


def parse_iso_duration(duration_iso):
    """
    Parse ISO 8601 duration to seconds.
    Example: PT2M30S = 150 seconds
    """
    match = ISO_DURATION_PATTERN.fullmatch(duration_iso or "")
    if not match:
        return 0

    days, hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return days * 86400 + hours * 3600 + minutes * 60 + seconds


class YouTubeChannelFetcher:
    def __init__(self, api_key, client=None):
        """Initialize YouTube API client"""
        self.youtube = client or build('youtube', 'v3', developerKey=api_key)
        self.quota_used = 0

    def extract_channel_id(self, url):
        """
        Extract channel ID from various YouTube URL formats

        Supported formats:
        - https://youtube.com/@username
        - https://youtube.com/channel/UCxxxxxxxx
        - https://youtube.com/c/channelname
        - https://youtube.com/user/username
        """
        # Remove trailing slashes and whitespace
        url = url.strip().rstrip('/')

        # Pattern 1: @username
        match = re.search(r'youtube\.com/@([\w.-]+)', url)
        if match:
            return self.get_channel_id_from_username(match.group(1))

        # Pattern 2: /channel/UCxxxxx (direct channel ID)
        match = re.search(r'youtube\.com/channel/(UC[\w-]+)', url)
        if match:
            return match.group(1)

        # Pattern 3: /c/channelname (custom URL)
        match = re.search(r'youtube\.com/c/([\w-]+)', url)
        if match:
            return self.get_channel_id_from_custom_url(match.group(1))

        # Pattern 4: /user/username (legacy)
        match = re.search(r'youtube\.com/user/([\w-]+)', url)
        if match:
            return self.get_channel_id_from_username(match.group(1))

        raise ValueError(
            f"Invalid YouTube channel URL format: {url}\n"
            "Supported formats:\n"
            "  - https://youtube.com/@username\n"
            "  - https://youtube.com/channel/UCxxxxxxxx\n"
            "  - https://youtube.com/c/channelname\n"
            "  - https://youtube.com/user/username"
        )

    def get_channel_id_from_username(self, username):
        """Get channel ID from @handle, falling back to the legacy username lookup"""
        handle = username.lstrip('@')
        try:
            response = self.youtube.channels().list(part='id', forHandle=handle).execute()
            self.quota_used += 1

            if response.get('items'):
                return response['items'][0]['id']

            # Fallback: Try forUsername (legacy)
            response = self.youtube.channels().list(part='id', forUsername=handle).execute()
            self.quota_used += 1

            if response.get('items'):
                return response['items'][0]['id']

            raise ValueError(f"Channel not found: {username}")

        except HttpError as e:
            if e.resp.status == 404:
                raise ValueError(f"Channel not found: {username}")
            raise

    def get_channel_id_from_custom_url(self, custom_url):
        """Get channel ID from custom URL (/c/channelname)"""
        # For custom URLs, we need to search
        try:
            response = self.youtube.search().list(
                part='snippet',
                q=custom_url,
                type='channel',
                maxResults=1
            ).execute()
            self.quota_used += 100  # Search is expensive

            if response.get('items'):
                return response['items'][0]['snippet']['channelId']

            raise ValueError(f"Channel not found with custom URL: {custom_url}")

        except HttpError as e:
            if e.resp.status == 404:
                raise ValueError(f"Channel not found: {custom_url}")
            raise

    def fetch_channel_info(self, channel_id):
        """Fetch channel metadata in the stored channel row shape"""
        try:
            response = self.youtube.channels().list(
                part='snippet,statistics,brandingSettings,contentDetails',
                id=channel_id
            ).execute()
            self.quota_used += 1

            if not response.get('items'):
                raise ValueError(f"Channel not found: {channel_id}")

            channel = response['items'][0]
            snippet = channel['snippet']
            statistics = channel.get('statistics', {})
            thumbnails = snippet.get('thumbnails', {})
            branding_image = channel.get('brandingSettings', {}).get('image', {})

            return {
                'id': channel['id'],
                'url': f"https://youtube.com/channel/{channel['id']}",
                'handle': snippet.get('customUrl', ''),
                'name': snippet['title'],
                'description': snippet.get('description', ''),
                'profile_image': (thumbnails.get('high') or thumbnails.get('default') or {}).get('url', ''),
                'banner_img': branding_image.get('bannerExternalUrl', ''),
                'subscribers': statistics.get('subscriberCount', '0'),
                'views': statistics.get('viewCount', '0'),
                'videos_count': int(statistics.get('videoCount', 0)),
                'created_date': snippet.get('publishedAt', ''),
                'location': snippet.get('country', ''),
                'uploads_playlist_id': channel.get('contentDetails', {}).get('relatedPlaylists', {}).get('uploads', ''),
            }

        except HttpError as e:
            if e.resp.status == 403:
                raise Exception("YouTube API quota exceeded. Wait until midnight PT or use a different API key.")
            elif e.resp.status == 404:
                raise ValueError(f"Channel not found: {channel_id}")
            else:
                raise Exception(f"YouTube API error: {e}")

    def fetch_channel_videos(self, channel_id, max_videos=DEFAULT_MAX_VIDEOS):
        """
        Fetch video rows from a channel uploads playlist.

        Strategy:
        1. Get uploads playlist ID from channel info
        2. Page through the uploads playlist (50 per page) until the cap
        3. Get statistics and durations in batches of 50
        4. Keep playlist order; counters stay numeric strings

        max_videos <= 0 disables the cap.
        """
        print(f"📹 Fetching videos from channel...")

        playlist_items = []
        next_page_token = None

        try:
            channel_info = self.fetch_channel_info(channel_id)
            uploads_playlist_id = channel_info['uploads_playlist_id']

            if not uploads_playlist_id:
                raise Exception("Could not find uploads playlist for this channel")

            while True:
                response = self.youtube.playlistItems().list(
                    part='snippet,contentDetails',
                    playlistId=uploads_playlist_id,
                    maxResults=PAGE_SIZE,
                    pageToken=next_page_token
                ).execute()
                self.quota_used += 1

                items = response.get('items', [])
                if not items:
                    break
                playlist_items.extend(items)

                next_page_token = response.get('nextPageToken')
                if not next_page_token:
                    break
                if max_videos > 0 and len(playlist_items) >= max_videos:
                    break

            if max_videos > 0:
                playlist_items = playlist_items[:max_videos]

            print(f"   Found {len(playlist_items)} videos")

            videos = []
            for i in range(0, len(playlist_items), PAGE_SIZE):
                batch = playlist_items[i:i + PAGE_SIZE]
                batch_ids = [item['contentDetails']['videoId'] for item in batch]

                response = self.youtube.videos().list(
                    part='statistics,snippet,contentDetails',
                    id=','.join(batch_ids)
                ).execute()
                self.quota_used += 1

                details = {video['id']: video for video in response.get('items', [])}

                for item in batch:
                    video_id = item['contentDetails']['videoId']
                    detail = details.get(video_id, {})
                    stats = detail.get('statistics', {})
                    snippet = item['snippet']
                    thumbnails = snippet.get('thumbnails', {})
                    videos.append({
                        'id': video_id,
                        'url': f"https://youtube.com/watch?v={video_id}",
                        'title': snippet.get('title', ''),
                        'description': snippet.get('description', ''),
                        'likes': stats.get('likeCount', '0'),
                        'views': stats.get('viewCount', '0'),
                        'comments': stats.get('commentCount', '0'),
                        'published_at': snippet.get('publishedAt', ''),
                        'preview_image': (thumbnails.get('high') or thumbnails.get('default') or {}).get('url', ''),
                        'youtuber_id': channel_id,
                        'tags': detail.get('snippet', {}).get('tags', []),
                        'duration': parse_iso_duration(detail.get('contentDetails', {}).get('duration', '')),
                    })

            print(f"✅ Collected {len(videos)} videos")
            return videos

        except HttpError as e:
            if e.resp.status == 403:
                raise Exception("YouTube API quota exceeded. Wait until midnight PT or use a different API key.")
            else:
                raise Exception(f"YouTube API error: {e}")

    def fetch_video_details(self, video_id):
        """Fetch one video resource (snippet + statistics) as returned by the API"""
        try:
            response = self.youtube.videos().list(part='snippet,statistics', id=video_id).execute()
            self.quota_used += 1
        except HttpError as e:
            if e.resp.status == 403:
                raise Exception("YouTube API quota exceeded. Wait until midnight PT or use a different API key.")
            elif e.resp.status == 404:
                raise ValueError(f"Video not found: {video_id}")
            else:
                raise Exception(f"YouTube API error: {e}")

        if not response.get('items'):
            raise ValueError(f"Video not found: {video_id}")
        return response['items'][0]

    def save_data(self, channel_info, videos, output_dir):
        """Save fetched data to JSON file"""
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        data = {
            'channel': channel_info,
            'videos': videos,
            'metadata': {
                'fetchedAt': time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime()),
                'videoCount': len(videos),
                'quotaUsed': self.quota_used
            }
        }

        output_file = output_path / 'raw_data.json'
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return str(output_file)


def main():
    """Main execution function"""
    if len(sys.argv) != 2:
        print("❌ Error: Missing channel URL")
        print("\nUsage:")
        print("  python3 -m tools.youtube_fetch_channel_data \"CHANNEL_URL\"")
        print("\nExample:")
        print("  python3 -m tools.youtube_fetch_channel_data \"https://youtube.com/@mkbhd\"")
        sys.exit(1)

    channel_url = sys.argv[1]

    api_key = os.getenv('YOUTUBE_API_KEY')
    max_videos = int(os.getenv('MAX_VIDEOS', DEFAULT_MAX_VIDEOS))
    output_folder = os.getenv('OUTPUT_FOLDER', '.tmp/channel_analytics')

    if not api_key:
        print("❌ Error: YOUTUBE_API_KEY not found in .env file")
        sys.exit(1)

    try:
        print("🚀 YouTube Channel Data Fetcher")
        print("=" * 50)
        print(f"Channel URL: {channel_url}")
        print(f"Max videos: {max_videos if max_videos > 0 else 'ALL'}")
        print()

        fetcher = YouTubeChannelFetcher(api_key)

        print("🔍 Extracting channel ID...")
        channel_id = fetcher.extract_channel_id(channel_url)
        print(f"   Channel ID: {channel_id}")
        print()

        print("📊 Fetching channel information...")
        channel_info = fetcher.fetch_channel_info(channel_id)
        print(f"   Channel: {channel_info['name']}")
        print(f"   Subscribers: {int(channel_info['subscribers'] or 0):,}")
        print(f"   Total Videos: {channel_info['videos_count']:,}")
        print(f"   Total Views: {int(channel_info['views'] or 0):,}")
        print()

        videos = fetcher.fetch_channel_videos(channel_id, max_videos)
        print()

        output_dir = f"{output_folder}/{channel_id}"
        output_file = fetcher.save_data(channel_info, videos, output_dir)

        print("=" * 50)
        print("✅ SUCCESS!")
        print(f"📁 Data saved to: {output_file}")
        print(f"📊 Videos fetched: {len(videos)}")
        print(f"💰 API quota used: ~{fetcher.quota_used} units")
        print()
        print("Next step:")
        print(f"  python3 -m tools.video_metrics {output_file}")

    except ValueError as e:
        print(f"❌ Validation Error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
