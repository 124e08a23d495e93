import unittest

from tools.generate_markdown_report import MarkdownReportGenerator
from tools.video_metrics import compute_metrics, empty_metrics, summarize_upload_patterns


def _raw_data(videos):
    return {
        "channel": {
            "id": "UC_TEST",
            "name": "Test Channel",
            "subscribers": "15000",
            "views": "2500000",
            "videos_count": len(videos),
        },
        "videos": videos,
        "metadata": {"quotaUsed": 12},
    }


VIDEOS = [
    {"id": "a", "title": "Two Sum | Arrays", "views": "5000", "likes": "300", "comments": "20",
     "published_at": "2024-06-20T10:00:00Z", "duration": 420},
    {"id": "b", "title": "Graph basics", "views": "1200", "likes": "40", "comments": "4",
     "published_at": "2024-06-22T19:00:00Z", "duration": 1200},
]


class MarkdownReportTests(unittest.TestCase):
    def test_report_sections(self):
        metrics = compute_metrics(VIDEOS, now="2024-06-30T00:00:00Z")
        metrics["uploadPatterns"] = summarize_upload_patterns(VIDEOS)
        insights = {"analysis": "Solid channel.", "source": "openai"}

        report = MarkdownReportGenerator(_raw_data(VIDEOS), metrics, insights).generate()

        self.assertIn("# YouTube Channel Performance Report", report)
        self.assertIn("**Channel:** Test Channel", report)
        self.assertIn("- Subscribers: 15.0K", report)
        self.assertIn("- Channel Views: 2.5M", report)
        self.assertIn("[Two Sum \\| Arrays](https://youtube.com/watch?v=a)", report)
        self.assertIn("| 2024-06-20 | 5.0K |", report)
        self.assertIn("Best Performing (total views): **medium**", report)
        self.assertIn("## Upload Patterns", report)
        self.assertIn("_AI analysis_", report)
        self.assertIn("Solid channel.", report)
        self.assertIn("**Quota Used:** 12 YouTube API units", report)

    def test_empty_metrics_render_placeholders(self):
        report = MarkdownReportGenerator(_raw_data([]), empty_metrics()).generate()

        self.assertIn("_No videos analyzed._", report)
        self.assertIn("_No uploads in the last 30 days._", report)
        self.assertNotIn("## Channel Analysis", report)
        self.assertNotIn("## Upload Patterns", report)

    def test_fallback_insights_are_labelled(self):
        report = MarkdownReportGenerator(
            _raw_data([]), empty_metrics(), {"analysis": "Deterministic.", "source": "fallback"}
        ).generate()

        self.assertIn("_Automated analysis_", report)


if __name__ == "__main__":
    unittest.main()
