import os
import tempfile
import unittest
from unittest import mock

import main


class PipelineTests(unittest.TestCase):
    def test_analysis_steps_chain_outputs(self):
        steps = main.analysis_steps(os.path.join("out", "UC_TEST"))

        self.assertEqual([step[0] for step in steps], ["video_metrics", "channel_insights", "generate_markdown_report"])
        self.assertEqual(steps[2][1][1], os.path.join("out", "UC_TEST", "metrics.json"))
        self.assertFalse(steps[1][3])

    def test_archive_report_copies_into_reports(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            channel_dir = os.path.join(temp_dir, "UC_TEST")
            reports_dir = os.path.join(temp_dir, "reports")
            os.makedirs(channel_dir)
            os.makedirs(reports_dir)
            with open(os.path.join(channel_dir, "report.md"), "w", encoding="utf-8") as f:
                f.write("# Report")

            with mock.patch.object(main, "REPORTS_FOLDER", reports_dir):
                main.archive_report(channel_dir, "UC_TEST")

            with open(os.path.join(reports_dir, "UC_TEST_report.md"), "r", encoding="utf-8") as f:
                self.assertEqual(f.read(), "# Report")

    def test_optional_step_failure_does_not_stop_pipeline(self):
        outcomes = {
            "youtube_fetch_channel_data": (True, "   Channel ID: UC_TEST\n"),
            "video_metrics": (True, ""),
            "channel_insights": (False, ""),
            "generate_markdown_report": (True, ""),
        }
        calls = []

        def fake_run_step(module, args, step_name):
            calls.append(module)
            return outcomes[module]

        with tempfile.TemporaryDirectory() as temp_dir, \
                mock.patch.object(main, "run_step", side_effect=fake_run_step), \
                mock.patch.object(main, "REPORTS_FOLDER", os.path.join(temp_dir, "reports")), \
                mock.patch.object(main.sys, "argv", ["main.py", "https://youtube.com/@test"]):
            main.main()

        self.assertEqual(calls, list(outcomes))


if __name__ == "__main__":
    unittest.main()
