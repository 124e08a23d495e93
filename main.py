import os
import re
import sys
import shutil
import subprocess

OUTPUT_FOLDER = os.getenv("OUTPUT_FOLDER", ".tmp/channel_analytics")
REPORTS_FOLDER = "reports"
CHANNEL_ID_PATTERN = re.compile(r"Channel ID: ([A-Za-z0-9_-]+)")


def run_step(module, args, step_name):
    """Run one tool module in a subprocess, echoing and returning its output."""
    print(f"\n🚀 Running Step: {step_name}...")
    command = [sys.executable, "-m", f"tools.{module}", *args]
    try:
        process = subprocess.Popen(command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)

        lines = []
        for line in process.stdout:
            print(line, end="")
            lines.append(line)
        process.wait()

        output = "".join(lines)
        if process.returncode != 0:
            print(f"❌ Error in {step_name}")
            return False, output
        return True, output
    except OSError as e:
        print(f"❌ Exception in {step_name}: {e}")
        return False, str(e)


def analysis_steps(channel_dir):
    """(module, args, step name, required) for everything after the fetch."""
    raw_data = os.path.join(channel_dir, "raw_data.json")
    metrics = os.path.join(channel_dir, "metrics.json")
    insights = os.path.join(channel_dir, "insights.json")
    return [
        ("video_metrics", [raw_data], "Computing Metrics", True),
        ("channel_insights", [raw_data, metrics], "Generating Insights", False),
        ("generate_markdown_report", [raw_data, metrics, insights], "Generating Markdown Report", True),
    ]


def archive_report(channel_dir, channel_id):
    source_report = os.path.join(channel_dir, "report.md")
    if not os.path.exists(source_report):
        return

    target_report = os.path.join(REPORTS_FOLDER, f"{channel_id}_report.md")
    try:
        shutil.copy(source_report, target_report)
        print(f"\n✨ Final report copied to: {target_report}")
    except OSError as e:
        print(f"⚠️ Could not copy report to {REPORTS_FOLDER}/ archive: {e}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python3 main.py \"CHANNEL_URL\"")
        sys.exit(1)

    channel_url = sys.argv[1]
    os.makedirs(REPORTS_FOLDER, exist_ok=True)

    success, output = run_step("youtube_fetch_channel_data", [channel_url], "Fetching Channel Data")
    if not success:
        sys.exit(1)

    match = CHANNEL_ID_PATTERN.search(output)
    if not match:
        print("❌ Could not determine Channel ID from output.")
        sys.exit(1)

    channel_id = match.group(1)
    print(f"✅ Identified Channel ID: {channel_id}")
    channel_dir = os.path.join(OUTPUT_FOLDER, channel_id)

    for module, args, step_name, required in analysis_steps(channel_dir):
        success, _ = run_step(module, args, step_name)
        if success:
            continue
        if required:
            sys.exit(1)
        print(f"⚠️ {step_name} failed, continuing without it.")

    archive_report(channel_dir, channel_id)

    print("\n✅ Channel Analytics Pipeline Complete!")


if __name__ == "__main__":
    main()
