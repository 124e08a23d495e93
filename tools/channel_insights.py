#!/usr/bin/env python3
"""
Channel Insights
Asks an LLM for a short narrative analysis of a channel's metrics,
falling back to a deterministic write-up when the API is unavailable

Usage:
    python3 -m tools.channel_insights path/to/raw_data.json path/to/metrics.json
"""

import os
import sys
import json
import time
import logging
from pathlib import Path

from dotenv import load_dotenv
from openai import OpenAI, OpenAIError, RateLimitError

from tools.video_metrics import format_number

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
MAX_RATE_LIMIT_RETRIES = 3

ENGAGEMENT_BENCHMARKS = {
    'poor': 2.0,
    'good': 4.0,
    'excellent': 6.0,
    'formula': '(Likes + Comments) / Views × 100',
}

DURATION_LABELS = {
    'short': 'short videos (under 5 minutes)',
    'medium': 'medium videos (5-15 minutes)',
    'long': 'long videos (over 15 minutes)',
}

SYSTEM_PROMPT = (
    "You are a YouTube growth analyst. Given channel statistics, write a concise analysis "
    "(under 200 words) covering engagement, growth, what content performs best, and two "
    "concrete recommendations."
)


def engagement_tier(rate):
    if rate >= ENGAGEMENT_BENCHMARKS['excellent']:
        return 'excellent'
    if rate >= ENGAGEMENT_BENCHMARKS['good']:
        return 'good'
    if rate >= ENGAGEMENT_BENCHMARKS['poor']:
        return 'average'
    return 'poor'


def build_prompt(channel, metrics):
    top_titles = "\n".join(
        f"- {video['title']} ({format_number(video['views'])} views, {video['engagementRate']:.2f}% engagement)"
        for video in metrics.get('topVideos', [])
    ) or "- none"
    duration = metrics.get('durationAnalysis', {})

    return (
        f"Channel: {channel.get('name', 'Unknown')}\n"
        f"Subscribers: {channel.get('subscribers', '0')}\n"
        f"Total views (analyzed videos): {metrics.get('totalViews', 0)}\n"
        f"Average views per video: {metrics.get('averageViews', 0)}\n"
        f"Engagement rate: {metrics.get('engagementRate', 0):.2f}%\n"
        f"Views growth (last 30 days vs previous 30): {metrics.get('viewsGrowth', 0):.1f}%\n"
        f"Video lengths: {duration.get('short', 0)} short, {duration.get('medium', 0)} medium, "
        f"{duration.get('long', 0)} long; best performing: {duration.get('bestPerforming', 'medium')}\n"
        f"Top videos:\n{top_titles}"
    )


def build_fallback_analysis(channel, metrics):
    """Deterministic analysis used whenever the completion API cannot answer."""
    name = channel.get('name') or 'This channel'
    rate = metrics.get('engagementRate', 0)
    tier = engagement_tier(rate)
    growth = metrics.get('viewsGrowth', 0)
    duration = metrics.get('durationAnalysis', {})
    best = duration.get('bestPerforming', 'medium')
    top_videos = metrics.get('topVideos', [])

    paragraphs = [
        f"{name} averages {format_number(metrics.get('averageViews', 0))} views per video with an "
        f"engagement rate of {rate:.2f}%, which is {tier} against the "
        f"{ENGAGEMENT_BENCHMARKS['good']:.0f}% benchmark ({ENGAGEMENT_BENCHMARKS['formula']}).",
    ]

    if growth > 0:
        paragraphs.append(f"Views from the last 30 days are up {growth:.1f}% on the previous 30 days.")
    elif growth < 0:
        paragraphs.append(f"Views from the last 30 days are down {abs(growth):.1f}% on the previous 30 days.")
    else:
        paragraphs.append("There is not enough recent upload history to measure 30-day growth.")

    paragraphs.append(f"The strongest format by total views is {DURATION_LABELS.get(best, best)}.")

    if top_videos:
        paragraphs.append(
            f"The top video, \"{top_videos[0]['title']}\", drew {format_number(top_videos[0]['views'])} views; "
            "study its topic and packaging for the next uploads."
        )

    if tier in ('poor', 'average'):
        paragraphs.append("Recommendation: ask a direct question in each video and pin a comment to lift engagement.")
    else:
        paragraphs.append("Recommendation: keep the current engagement habits and publish on a steady schedule.")

    return " ".join(paragraphs)


def retry_after_seconds(exc, attempt):
    """Server-supplied ``retry-after`` delay, or exponential backoff without one."""
    response = getattr(exc, 'response', None)
    raw = response.headers.get('retry-after') if response is not None else None
    try:
        return max(float(raw), 0.0)
    except (TypeError, ValueError):
        return float(2 ** attempt)


class ChannelInsightsGenerator:
    def __init__(self, api_key="", model=DEFAULT_MODEL, client=None, max_retries=MAX_RATE_LIMIT_RETRIES, sleep=time.sleep):
        """Without an API key or client every call uses the deterministic fallback."""
        self.model = model
        self.max_retries = max_retries
        self.sleep = sleep
        if client is not None:
            self.client = client
        elif api_key:
            # retries on 429 are handled here so retry-after can be honored
            self.client = OpenAI(api_key=api_key, max_retries=0)
        else:
            self.client = None

    def generate(self, channel, metrics):
        fallback = {'analysis': build_fallback_analysis(channel, metrics), 'source': 'fallback'}
        if self.client is None:
            return fallback

        try:
            text = self._request_completion(build_prompt(channel, metrics))
        except OpenAIError as exc:
            logger.warning("Insights request failed, using fallback analysis: %s", exc)
            return fallback

        if not text or not text.strip():
            return fallback
        return {'analysis': text.strip(), 'source': 'openai'}

    def _request_completion(self, prompt):
        attempt = 0
        while True:
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=0.7,
                    max_tokens=500,
                )
                return response.choices[0].message.content or ""
            except RateLimitError as exc:
                if attempt >= self.max_retries:
                    raise
                delay = retry_after_seconds(exc, attempt)
                attempt += 1
                logger.info("Rate limited by completion API, retry %d/%d in %.1fs", attempt, self.max_retries, delay)
                self.sleep(delay)


def main():
    """Main execution function"""
    if len(sys.argv) != 3:
        print("❌ Error: Missing file paths")
        print("\nUsage:")
        print("  python3 -m tools.channel_insights path/to/raw_data.json path/to/metrics.json")
        sys.exit(1)

    raw_path = Path(sys.argv[1])
    metrics_path = Path(sys.argv[2])

    try:
        with open(raw_path, 'r', encoding='utf-8') as f:
            raw_data = json.load(f)
        with open(metrics_path, 'r', encoding='utf-8') as f:
            metrics = json.load(f)

        logging.basicConfig(level=os.getenv('LOG_LEVEL', 'WARNING').upper())

        print("🤖 Generating channel insights...")
        generator = ChannelInsightsGenerator(
            api_key=os.getenv('OPENAI_API_KEY', ''),
            model=os.getenv('OPENAI_MODEL', DEFAULT_MODEL),
        )
        insights = generator.generate(raw_data.get('channel', {}), metrics)
        print(f"   Source: {insights['source']}")

        output_file = metrics_path.parent / 'insights.json'
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(insights, f, indent=2, ensure_ascii=False)

        print(f"\n📁 Insights saved to: {output_file}")

    except json.JSONDecodeError as e:
        print(f"❌ Error: Invalid JSON file: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
