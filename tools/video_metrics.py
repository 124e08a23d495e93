#!/usr/bin/env python3
"""
Video Performance Metrics
Aggregates stored video rows into channel performance metrics

Computes:
1. Totals, averages and the aggregate engagement rate
2. Views growth (last 30 days vs. the previous 30 days)
3. Top 5 videos by views
4. Views and engagement trends for the last 30 days
5. Duration bucket analysis

Usage:
    python3 -m tools.video_metrics path/to/raw_data.json
"""

import sys
import json
import math
from pathlib import Path
from datetime import datetime, timedelta, timezone
from collections import Counter

import numpy as np
from dateutil import parser as dateparser


WINDOW_DAYS = 30
TOP_VIDEOS_LIMIT = 5
SHORT_MAX_SECONDS = 300   # under 5 minutes
MEDIUM_MAX_SECONDS = 900  # 5-15 minutes, inclusive
DURATION_BUCKETS = ('short', 'medium', 'long')
TIME_OF_DAY_BUCKETS = ('morning', 'afternoon', 'evening', 'night')


def parse_count(value):
    """Parse a numeric string defensively; anything unparsable is 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        try:
            parsed = int(float(str(value).strip()))
        except (TypeError, ValueError, OverflowError):
            return 0
    return max(parsed, 0)


def parse_published_at(raw_value):
    """Parse an ISO-8601 timestamp into an aware UTC datetime, or None."""
    if not raw_value:
        return None
    if isinstance(raw_value, datetime):
        parsed = raw_value
    else:
        try:
            parsed = dateparser.isoparse(str(raw_value))
        except (TypeError, ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def engagement_rate(views, likes, comments):
    return ((likes + comments) / views) * 100 if views > 0 else 0.0


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def duration_bucket(seconds):
    if seconds < SHORT_MAX_SECONDS:
        return 'short'
    if seconds <= MEDIUM_MAX_SECONDS:
        return 'medium'
    return 'long'


def empty_metrics():
    return {
        'totalViews': 0,
        'totalLikes': 0,
        'totalComments': 0,
        'averageViews': 0,
        'averageLikes': 0,
        'averageComments': 0,
        'engagementRate': 0,
        'viewsGrowth': 0,
        'topVideos': [],
        'viewsTrend': [],
        'durationAnalysis': {
            'short': 0,
            'medium': 0,
            'long': 0,
            'bestPerforming': 'medium',
            'averageDuration': 0,
        },
        'engagementTrend': [],
    }


def _normalize(video):
    return {
        'id': video.get('id', ''),
        'title': video.get('title', ''),
        'views': parse_count(video.get('views')),
        'likes': parse_count(video.get('likes')),
        'comments': parse_count(video.get('comments')),
        'published_at': parse_published_at(video.get('published_at')),
        'duration': parse_count(video.get('duration')),
    }


def _in_window(published_at, start, end):
    return published_at is not None and start <= published_at < end


def compute_metrics(videos, now=None):
    """
    Build the performance metrics for a list of video rows.

    Pure function of its input: the only ambient value is ``now``, which
    defaults to the current UTC time and anchors the 30-day windows.
    """
    if not videos:
        return empty_metrics()

    now = parse_published_at(now) if now is not None else datetime.now(timezone.utc)
    processed = [_normalize(video) for video in videos]
    count = len(processed)

    total_views = sum(video['views'] for video in processed)
    total_likes = sum(video['likes'] for video in processed)
    total_comments = sum(video['comments'] for video in processed)

    thirty_days_ago = now - timedelta(days=WINDOW_DAYS)
    sixty_days_ago = now - timedelta(days=WINDOW_DAYS * 2)

    recent = [video for video in processed if _in_window(video['published_at'], thirty_days_ago, now)]
    previous = [video for video in processed if _in_window(video['published_at'], sixty_days_ago, thirty_days_ago)]

    last_30_days_views = sum(video['views'] for video in recent)
    previous_30_days_views = sum(video['views'] for video in previous)
    views_growth = (
        (last_30_days_views - previous_30_days_views) / previous_30_days_views * 100
        if previous_30_days_views > 0 else 0
    )

    # sorted() is stable, so equal view counts keep input order
    ranked = sorted(processed, key=lambda video: video['views'], reverse=True)
    top_videos = [
        {
            'id': video['id'],
            'title': video['title'],
            'views': video['views'],
            'likes': video['likes'],
            'comments': video['comments'],
            'engagementRate': engagement_rate(video['views'], video['likes'], video['comments']),
        }
        for video in ranked[:TOP_VIDEOS_LIMIT]
    ]

    views_by_date = {}
    engagement_by_date = {}
    for video in recent:
        date_str = video['published_at'].strftime('%Y-%m-%d')
        views_by_date[date_str] = views_by_date.get(date_str, 0) + video['views']
        engagement_by_date.setdefault(date_str, []).append(
            engagement_rate(video['views'], video['likes'], video['comments'])
        )

    views_trend = [
        {'date': date_str, 'views': views}
        for date_str, views in sorted(views_by_date.items())
    ]
    engagement_trend = [
        {'date': date_str, 'engagementRate': float(np.mean(rates))}
        for date_str, rates in sorted(engagement_by_date.items())
    ]

    return {
        'totalViews': total_views,
        'totalLikes': total_likes,
        'totalComments': total_comments,
        'averageViews': _round_half_up(total_views / count),
        'averageLikes': _round_half_up(total_likes / count),
        'averageComments': _round_half_up(total_comments / count),
        'engagementRate': engagement_rate(total_views, total_likes, total_comments),
        'viewsGrowth': views_growth,
        'topVideos': top_videos,
        'viewsTrend': views_trend,
        'durationAnalysis': analyze_durations(processed),
        'engagementTrend': engagement_trend,
    }


def analyze_durations(processed):
    """
    Bucket videos by duration and pick the bucket with the most total views.

    ``bestPerforming`` is weighted by summed views, not by video count.
    """
    counts = {bucket: 0 for bucket in DURATION_BUCKETS}
    views = {bucket: 0 for bucket in DURATION_BUCKETS}

    for video in processed:
        bucket = duration_bucket(video['duration'])
        counts[bucket] += 1
        views[bucket] += video['views']

    # max() keeps the first of equal buckets: short, medium, long
    best_performing = max(DURATION_BUCKETS, key=lambda bucket: views[bucket])
    durations = [video['duration'] for video in processed]

    return {
        **counts,
        'bestPerforming': best_performing,
        'averageDuration': float(np.mean(durations)) if durations else 0,
    }


def format_number(num):
    if num >= 1000000:
        return f"{num / 1000000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(num)


def format_duration(seconds):
    seconds = int(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, remaining_seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{remaining_seconds:02d}"
    return f"{minutes}:{remaining_seconds:02d}"


def get_time_of_day(hour):
    if 5 <= hour < 12:
        return 'morning'
    if 12 <= hour < 17:
        return 'afternoon'
    if 17 <= hour < 21:
        return 'evening'
    return 'night'


def extract_common_phrases(titles):
    """Two-word phrases repeated across titles, top 5 by count."""
    phrases = Counter()
    for title in titles:
        words = title.lower().split(' ')
        for first, second in zip(words, words[1:]):
            phrases[f"{first} {second}"] += 1

    return [
        {'phrase': phrase, 'count': count}
        for phrase, count in phrases.most_common()
        if count > 1
    ][:5]


def summarize_upload_patterns(videos):
    upload_times = {bucket: 0 for bucket in TIME_OF_DAY_BUCKETS}
    for video in videos or []:
        published_at = parse_published_at(video.get('published_at'))
        if published_at is not None:
            upload_times[get_time_of_day(published_at.hour)] += 1

    return {
        'commonPhrases': extract_common_phrases([video.get('title', '') for video in videos or []]),
        'uploadTimes': upload_times,
    }


def main():
    """Main execution function"""
    if len(sys.argv) != 2:
        print("❌ Error: Missing data file path")
        print("\nUsage:")
        print("  python3 -m tools.video_metrics path/to/raw_data.json")
        sys.exit(1)

    data_path = Path(sys.argv[1])
    if not data_path.exists():
        print(f"❌ Error: File not found: {data_path}")
        sys.exit(1)

    try:
        print(f"📂 Loading data from: {data_path}")
        with open(data_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        videos = data.get('videos', [])
        metrics = compute_metrics(videos)
        metrics['uploadPatterns'] = summarize_upload_patterns(videos)

        print("\n📈 Performance Metrics")
        print("=" * 50)
        print(f"   Total Views: {format_number(metrics['totalViews'])}")
        print(f"   Engagement Rate: {metrics['engagementRate']:.2f}%")
        print(f"   Views Growth: {metrics['viewsGrowth']:.1f}%")
        print(f"   Best Duration Bucket: {metrics['durationAnalysis']['bestPerforming']}")

        output_file = data_path.parent / 'metrics.json'
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(metrics, f, indent=2, ensure_ascii=False)

        print(f"\n📁 Metrics saved to: {output_file}")
        print("\nNext step:")
        print(f"  python3 -m tools.channel_insights {data_path} {output_file}")

    except json.JSONDecodeError as e:
        print(f"❌ Error: Invalid JSON file: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
