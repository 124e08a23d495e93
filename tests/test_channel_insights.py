import unittest
from types import SimpleNamespace

import httpx
from openai import APIConnectionError, RateLimitError

from tools.channel_insights import (
    ChannelInsightsGenerator,
    build_fallback_analysis,
    build_prompt,
    engagement_tier,
    retry_after_seconds,
)


CHANNEL = {"name": "Algo Channel", "subscribers": "12000"}
METRICS = {
    "totalViews": 30000,
    "averageViews": 3000,
    "engagementRate": 4.5,
    "viewsGrowth": 12.5,
    "topVideos": [
        {"id": "a", "title": "Graphs 101", "views": 9000, "likes": 400, "comments": 20, "engagementRate": 4.67},
    ],
    "durationAnalysis": {"short": 1, "medium": 6, "long": 3, "bestPerforming": "medium", "averageDuration": 640},
}

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _rate_limit_error(retry_after=None):
    headers = {"retry-after": retry_after} if retry_after is not None else {}
    response = httpx.Response(429, headers=headers, request=REQUEST)
    return RateLimitError("rate limited", response=response, body=None)


def _completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


class FakeCompletions:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _client(outcomes):
    completions = FakeCompletions(outcomes)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


class EngagementTierTests(unittest.TestCase):
    def test_benchmarks(self):
        self.assertEqual(engagement_tier(1.0), "poor")
        self.assertEqual(engagement_tier(2.0), "average")
        self.assertEqual(engagement_tier(4.0), "good")
        self.assertEqual(engagement_tier(6.5), "excellent")


class PromptTests(unittest.TestCase):
    def test_prompt_includes_metrics_and_top_video(self):
        prompt = build_prompt(CHANNEL, METRICS)

        self.assertIn("Algo Channel", prompt)
        self.assertIn("4.50%", prompt)
        self.assertIn("Graphs 101", prompt)
        self.assertIn("best performing: medium", prompt)

    def test_fallback_is_deterministic(self):
        first = build_fallback_analysis(CHANNEL, METRICS)

        self.assertEqual(first, build_fallback_analysis(CHANNEL, METRICS))
        self.assertIn("4.50%", first)
        self.assertIn("good", first)
        self.assertIn("up 12.5%", first)
        self.assertIn("medium videos", first)


class RetryAfterTests(unittest.TestCase):
    def test_header_is_honored(self):
        self.assertEqual(retry_after_seconds(_rate_limit_error("7"), 0), 7.0)

    def test_exponential_backoff_without_header(self):
        self.assertEqual(retry_after_seconds(_rate_limit_error(), 2), 4.0)


class ChannelInsightsGeneratorTests(unittest.TestCase):
    def test_no_key_uses_fallback(self):
        insights = ChannelInsightsGenerator(api_key="").generate(CHANNEL, METRICS)

        self.assertEqual(insights["source"], "fallback")
        self.assertEqual(insights["analysis"], build_fallback_analysis(CHANNEL, METRICS))

    def test_successful_completion(self):
        client, completions = _client([_completion("  Strong channel.  ")])

        insights = ChannelInsightsGenerator(client=client, model="test-model").generate(CHANNEL, METRICS)

        self.assertEqual(insights, {"analysis": "Strong channel.", "source": "openai"})
        self.assertEqual(completions.calls[0]["model"], "test-model")

    def test_rate_limit_is_retried_with_retry_after(self):
        client, completions = _client([_rate_limit_error("2"), _rate_limit_error("3"), _completion("Recovered.")])
        sleeps = []

        generator = ChannelInsightsGenerator(client=client, sleep=sleeps.append)
        insights = generator.generate(CHANNEL, METRICS)

        self.assertEqual(insights["source"], "openai")
        self.assertEqual(sleeps, [2.0, 3.0])
        self.assertEqual(len(completions.calls), 3)

    def test_exhausted_retries_fall_back(self):
        client, completions = _client([_rate_limit_error("1") for _ in range(4)])
        sleeps = []

        insights = ChannelInsightsGenerator(client=client, sleep=sleeps.append).generate(CHANNEL, METRICS)

        self.assertEqual(insights["source"], "fallback")
        self.assertEqual(len(completions.calls), 4)
        self.assertEqual(len(sleeps), 3)

    def test_api_error_falls_back(self):
        client, _ = _client([APIConnectionError(request=REQUEST)])

        insights = ChannelInsightsGenerator(client=client).generate(CHANNEL, METRICS)

        self.assertEqual(insights["source"], "fallback")

    def test_empty_completion_falls_back(self):
        client, _ = _client([_completion("   ")])

        insights = ChannelInsightsGenerator(client=client).generate(CHANNEL, METRICS)

        self.assertEqual(insights["source"], "fallback")


if __name__ == "__main__":
    unittest.main()
