#!/usr/bin/env python3
"""
Video Record Cleanup
Deletes the oldest stored video rows from the web app database

Usage:
    python3 -m tools.cleanup_video_records [count]
"""

import sys

from web.app import app
from web.db import SessionLocal
from web.services.cleanup import delete_video_records


def main():
    """Main execution function"""
    if len(sys.argv) > 2:
        print("❌ Error: Too many arguments")
        print("\nUsage:")
        print("  python3 -m tools.cleanup_video_records [count]")
        sys.exit(1)

    count = app.config.get("CLEANUP_BATCH_SIZE", 500)

    try:
        if len(sys.argv) == 2:
            count = int(sys.argv[1])
            if count < 0:
                raise ValueError("count must be zero or positive")

        print(f"🧹 Deleting up to {count} video records (oldest first)...")
        with app.app_context():
            db_session = SessionLocal()
            try:
                deleted = delete_video_records(db_session, count)
            finally:
                db_session.close()

        print(f"✅ Cleanup completed. Deleted {deleted} records.")

    except ValueError as e:
        print(f"❌ Validation Error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
