import os
import tempfile
import unittest
from datetime import datetime, timedelta
from pathlib import Path
from unittest import mock

from tools.content_analyzer import VideoContentAnalyzer
from web.app import create_app
from web.db import SessionLocal
from web.models import Channel, Video


ENV_KEYS = [
    "DATABASE_URL",
    "AUTO_CREATE_SCHEMA",
    "SECRET_KEY",
    "YOUTUBE_API_KEY",
    "OPENAI_API_KEY",
    "MAX_VIDEOS",
    "REFRESH_INTERVAL_HOURS",
]


class FakeFetcher:
    def __init__(self, channel_error=None, videos_error=None):
        self.channel_error = channel_error
        self.videos_error = videos_error
        self.info_calls = 0
        self.video_calls = []

    def extract_channel_id(self, url):
        if self.channel_error is not None:
            raise self.channel_error
        return "UC_TEST"

    def fetch_channel_info(self, channel_id):
        self.info_calls += 1
        return {
            "id": channel_id,
            "url": f"https://youtube.com/channel/{channel_id}",
            "handle": "@test",
            "name": "Test Channel",
            "description": "",
            "profile_image": "",
            "banner_img": "",
            "subscribers": "1000",
            "views": "50000",
            "videos_count": 2,
            "created_date": "2020-01-01T00:00:00Z",
            "location": "US",
        }

    def fetch_channel_videos(self, channel_id, max_videos):
        if self.videos_error is not None:
            raise self.videos_error
        self.video_calls.append(max_videos)
        published = (datetime.utcnow() - timedelta(days=3)).strftime("%Y-%m-%dT%H:%M:%SZ")
        return [
            {
                "id": video_id,
                "url": f"https://youtube.com/watch?v={video_id}",
                "title": f"Title {video_id}",
                "description": "",
                "likes": "10",
                "views": views,
                "comments": "2",
                "published_at": published,
                "preview_image": "",
                "youtuber_id": channel_id,
                "duration": 400,
            }
            for video_id, views in (("v1", "1000"), ("v2", "3000"))
        ]


class ApiRouteTests(unittest.TestCase):
    def setUp(self):
        self.previous_env = {key: os.environ.get(key) for key in ENV_KEYS}
        self.temp_dir = tempfile.TemporaryDirectory()

        db_path = Path(self.temp_dir.name) / "test.db"
        os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"
        os.environ["AUTO_CREATE_SCHEMA"] = "1"
        os.environ["SECRET_KEY"] = "test-secret"
        os.environ["YOUTUBE_API_KEY"] = "test-key"
        os.environ["OPENAI_API_KEY"] = ""
        os.environ["MAX_VIDEOS"] = "50"
        os.environ["REFRESH_INTERVAL_HOURS"] = "24"

        self.app = create_app()
        self.client = self.app.test_client()
        self.fetcher = FakeFetcher()
        patcher = mock.patch("web.routes.api.YouTubeChannelFetcher", return_value=self.fetcher)
        self.fetcher_class = patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        SessionLocal.remove()
        self.temp_dir.cleanup()
        for key, value in self.previous_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value

    def _add_channel(self):
        response = self.client.post("/api/channels", json={"url": "https://youtube.com/@test"})
        self.assertEqual(response.status_code, 201)
        return response.get_json()

    def test_add_channel_and_list(self):
        body = self._add_channel()

        self.assertEqual(body["id"], "UC_TEST")
        self.assertEqual(body["subscribers"], 1000)
        self.assertTrue(body["refreshed"])
        self.fetcher_class.assert_called_with("test-key")

        listing = self.client.get("/api/channels").get_json()
        self.assertEqual(listing["count"], 1)
        self.assertEqual(listing["items"][0]["name"], "Test Channel")

    def test_fresh_channel_is_not_refetched(self):
        self._add_channel()
        body = self._add_channel()

        self.assertFalse(body["refreshed"])
        self.assertEqual(self.fetcher.info_calls, 1)

    def test_add_channel_validation(self):
        response = self.client.post("/api/channels", json={})
        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.get_json())

        response = self.client.post("/api/channels", json={"url": "https://example.com/nope"})
        self.assertEqual(response.status_code, 400)

    def test_upstream_failure_is_502(self):
        self.fetcher.channel_error = Exception("YouTube API quota exceeded.")

        response = self.client.post("/api/channels", json={"url": "https://youtube.com/@test"})

        self.assertEqual(response.status_code, 502)
        self.assertIn("quota", response.get_json()["error"])

    def test_missing_api_key_is_502(self):
        self.app.config["YOUTUBE_API_KEY"] = ""

        response = self.client.post("/api/channels", json={"url": "https://youtube.com/@test"})

        self.assertEqual(response.status_code, 502)

    def test_unknown_channel_is_404(self):
        self.assertEqual(self.client.get("/api/channels/UC_NOPE").status_code, 404)
        self.assertEqual(self.client.get("/api/channels/UC_NOPE/videos").status_code, 404)
        self.assertEqual(self.client.post("/api/channels/UC_NOPE/videos").status_code, 404)
        self.assertEqual(self.client.get("/api/channels/UC_NOPE/metrics").status_code, 404)
        self.assertEqual(self.client.get("/api/channels/UC_NOPE/insights").status_code, 404)
        self.assertEqual(self.client.delete("/api/channels/UC_NOPE").status_code, 404)

    def test_collect_videos_then_cache_then_force(self):
        self._add_channel()

        first = self.client.post("/api/channels/UC_TEST/videos").get_json()
        self.assertEqual((first["written"], first["refreshed"], first["count"]), (2, True, 2))
        self.assertEqual(self.fetcher.video_calls, [50])

        cached = self.client.post("/api/channels/UC_TEST/videos").get_json()
        self.assertFalse(cached["refreshed"])

        forced = self.client.post("/api/channels/UC_TEST/videos?force=1").get_json()
        self.assertTrue(forced["refreshed"])
        self.assertEqual(len(self.fetcher.video_calls), 2)

        videos = self.client.get("/api/channels/UC_TEST/videos").get_json()
        self.assertEqual(videos["count"], 2)
        self.assertEqual({video["id"] for video in videos["items"]}, {"v1", "v2"})

    def test_video_collection_failure_is_502(self):
        self._add_channel()
        self.fetcher.videos_error = Exception("YouTube API error: boom")

        response = self.client.post("/api/channels/UC_TEST/videos")

        self.assertEqual(response.status_code, 502)

    def test_metrics_and_insights_from_stored_rows(self):
        self._add_channel()
        self.client.post("/api/channels/UC_TEST/videos")

        metrics = self.client.get("/api/channels/UC_TEST/metrics").get_json()
        self.assertEqual(metrics["totalViews"], 4000)
        self.assertEqual(metrics["topVideos"][0]["id"], "v2")
        self.assertEqual(metrics["durationAnalysis"]["medium"], 2)
        self.assertEqual(len(metrics["viewsTrend"]), 1)
        self.assertIn("uploadPatterns", metrics)

        insights = self.client.get("/api/channels/UC_TEST/insights").get_json()
        self.assertEqual(insights["insights"]["source"], "fallback")
        self.assertEqual(insights["metrics"]["totalViews"], 4000)

    def test_metrics_for_channel_without_videos(self):
        self._add_channel()

        metrics = self.client.get("/api/channels/UC_TEST/metrics").get_json()

        self.assertEqual(metrics["totalViews"], 0)
        self.assertEqual(metrics["durationAnalysis"]["bestPerforming"], "medium")

    def test_delete_channel_removes_videos(self):
        self._add_channel()
        self.client.post("/api/channels/UC_TEST/videos")

        response = self.client.delete("/api/channels/UC_TEST")
        self.assertEqual(response.status_code, 200)

        db_session = SessionLocal()
        try:
            self.assertIsNone(db_session.get(Channel, "UC_TEST"))
            self.assertEqual(db_session.query(Video).count(), 0)
        finally:
            db_session.close()

    def test_video_analysis_always_200(self):
        analyzer = VideoContentAnalyzer(
            metadata_provider=lambda video_id: {"snippet": {"title": "Sorting", "description": ""}, "statistics": {}},
            transcript_provider=lambda video_id: [{"text": "Merge sort splits the array."}],
        )
        with mock.patch.object(VideoContentAnalyzer, "from_api_key", return_value=analyzer):
            response = self.client.get("/api/videos/abc/analysis")

        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body["title"], "Sorting")
        self.assertEqual(body["problemType"], "array")

    def test_video_analysis_without_key_degrades(self):
        self.app.config["YOUTUBE_API_KEY"] = ""

        response = self.client.get("/api/videos/abc/analysis")

        self.assertEqual(response.status_code, 200)
        self.assertIn("Error", response.get_json()["contentAnalysis"])


if __name__ == "__main__":
    unittest.main()
