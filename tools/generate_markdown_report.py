#!/usr/bin/env python3
"""
Markdown Report Generator
Generates a channel performance report in markdown format

Usage:
    python3 -m tools.generate_markdown_report path/to/raw_data.json path/to/metrics.json [path/to/insights.json]
"""

import sys
import json
from pathlib import Path
from datetime import datetime

from tools.video_metrics import format_duration, format_number, parse_count


class MarkdownReportGenerator:
    def __init__(self, raw_data, metrics, insights=None):
        """Initialize generator with data"""
        self.channel = raw_data.get('channel', {})
        self.videos = raw_data.get('videos', [])
        self.metadata = raw_data.get('metadata', {})
        self.metrics = metrics
        self.insights = insights or {}

    def generate_header(self):
        """Generate report header"""
        date_str = datetime.now().strftime('%B %d, %Y')

        return f"""# YouTube Channel Performance Report
**Channel:** {self.channel.get('name', 'Unknown')}
**Date:** {date_str}
**Videos Analyzed:** {len(self.videos)}

---

"""

    def generate_overview(self):
        """Generate performance overview section"""
        metrics = self.metrics
        growth = metrics.get('viewsGrowth', 0)
        arrow = "↑" if growth >= 0 else "↓"

        return f"""## Performance Overview

**Channel Stats:**
- Subscribers: {format_number(parse_count(self.channel.get('subscribers')))}
- Channel Views: {format_number(parse_count(self.channel.get('views')))}
- Videos on Channel: {self.channel.get('videos_count', 0):,}

**Analyzed Videos:**
- Total Views: {format_number(metrics.get('totalViews', 0))} ({arrow} {abs(growth):.1f}% from last month)
- Total Likes: {format_number(metrics.get('totalLikes', 0))} (average {format_number(metrics.get('averageLikes', 0))})
- Total Comments: {format_number(metrics.get('totalComments', 0))} (average {format_number(metrics.get('averageComments', 0))})
- Engagement Rate: {metrics.get('engagementRate', 0):.2f}% (Likes + Comments) / Views

---

"""

    def generate_top_videos(self):
        """Generate top performing videos table"""
        text = "## Top Performing Videos\n\n"
        top_videos = self.metrics.get('topVideos', [])
        if not top_videos:
            return text + "_No videos analyzed._\n\n---\n\n"

        text += "| # | Title | Views | Likes | Comments | Engagement |\n"
        text += "|---|-------|-------|-------|----------|------------|\n"
        for i, video in enumerate(top_videos, 1):
            title = video['title'].replace('|', '\\|')
            text += (
                f"| {i} | [{title}](https://youtube.com/watch?v={video['id']}) "
                f"| {format_number(video['views'])} | {format_number(video['likes'])} "
                f"| {format_number(video['comments'])} | {video['engagementRate']:.2f}% |\n"
            )

        return text + "\n---\n\n"

    def generate_trend(self):
        """Generate views trend for the last 30 days"""
        text = "## Views Trend (Last 30 Days)\n\n"
        trend = self.metrics.get('viewsTrend', [])
        if not trend:
            return text + "_No uploads in the last 30 days._\n\n---\n\n"

        engagement_by_date = {
            point['date']: point['engagementRate']
            for point in self.metrics.get('engagementTrend', [])
        }
        text += "| Date | Views | Avg Engagement |\n|------|-------|----------------|\n"
        for point in trend:
            rate = engagement_by_date.get(point['date'])
            rate_text = f"{rate:.2f}%" if rate is not None else "n/a"
            text += f"| {point['date']} | {format_number(point['views'])} | {rate_text} |\n"

        return text + "\n---\n\n"

    def generate_duration_analysis(self):
        """Generate duration bucket section"""
        duration = self.metrics.get('durationAnalysis', {})
        return f"""## Duration Analysis

- Short (< 5 min): {duration.get('short', 0)} videos
- Medium (5-15 min): {duration.get('medium', 0)} videos
- Long (> 15 min): {duration.get('long', 0)} videos
- Average Duration: {format_duration(duration.get('averageDuration', 0))}
- 🏆 Best Performing (total views): **{duration.get('bestPerforming', 'medium')}**

---

"""

    def generate_upload_patterns(self):
        """Generate title phrase and upload time section"""
        patterns = self.metrics.get('uploadPatterns')
        if not patterns:
            return ""

        text = "## Upload Patterns\n\n**Common Title Phrases:**\n"
        phrases = patterns.get('commonPhrases', [])
        if phrases:
            for item in phrases:
                text += f"- `{item['phrase']}` ({item['count']} titles)\n"
        else:
            text += "- No repeated phrases\n"

        text += "\n**Upload Time of Day (UTC):**\n"
        for bucket, count in patterns.get('uploadTimes', {}).items():
            text += f"- {bucket.title()}: {count}\n"

        return text + "\n---\n\n"

    def generate_insights(self):
        """Generate narrative analysis section"""
        analysis = self.insights.get('analysis')
        if not analysis:
            return ""

        source = "AI analysis" if self.insights.get('source') == 'openai' else "Automated analysis"
        return f"## Channel Analysis\n\n_{source}_\n\n{analysis}\n\n---\n\n"

    def generate_footer(self):
        """Generate report footer"""
        return f"""**Report Generated:** {datetime.now().strftime('%B %d, %Y at %I:%M %p')}
**Quota Used:** {self.metadata.get('quotaUsed', 'N/A')} YouTube API units
"""

    def generate(self):
        """Generate complete markdown report"""
        print("📝 Generating markdown report...")

        report = ""
        report += self.generate_header()
        report += self.generate_overview()
        report += self.generate_top_videos()
        report += self.generate_trend()
        report += self.generate_duration_analysis()
        report += self.generate_upload_patterns()
        report += self.generate_insights()
        report += self.generate_footer()

        print("✅ Report generated successfully!")

        return report


def main():
    """Main execution function"""
    if len(sys.argv) not in (3, 4):
        print("❌ Error: Missing required files")
        print("\nUsage:")
        print("  python3 -m tools.generate_markdown_report path/to/raw_data.json path/to/metrics.json [path/to/insights.json]")
        sys.exit(1)

    raw_data_file = sys.argv[1]
    metrics_file = sys.argv[2]
    insights_file = sys.argv[3] if len(sys.argv) == 4 else None

    try:
        print("📂 Loading data files...")
        with open(raw_data_file, 'r', encoding='utf-8') as f:
            raw_data = json.load(f)
        with open(metrics_file, 'r', encoding='utf-8') as f:
            metrics = json.load(f)
        insights = None
        if insights_file and Path(insights_file).exists():
            with open(insights_file, 'r', encoding='utf-8') as f:
                insights = json.load(f)

        print("\n🚀 Generating Markdown Report")
        print("=" * 50)

        generator = MarkdownReportGenerator(raw_data, metrics, insights)
        report = generator.generate()

        output_path = Path(raw_data_file).parent / 'report.md'
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(report)

        print("\n" + "=" * 50)
        print("✅ SUCCESS!")
        print(f"📁 Report saved to: {output_path}")
        print("\n📄 Report Preview:")
        print("=" * 50)
        print(report[:1000] + "\n\n... (truncated for display)\n")

    except FileNotFoundError as e:
        print(f"❌ Error: File not found: {e}")
        sys.exit(1)
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
