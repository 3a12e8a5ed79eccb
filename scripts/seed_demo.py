#!/usr/bin/env python3
"""Seed a local demo database with a few videos.

Usage:
    python scripts/seed_demo.py

Then serve it with:
    DATABASE_URL=sqlite:///demo.db DATABASE_SERVICE_KEY=local SERVER_ADDON=panel tubedesk

This script:
1. Creates the schema in demo.db if missing
2. Inserts demo videos through the storage client
3. Fills in a transcript and summary for the first one
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from tubedesk.catalog.videos import create_video, list_videos, update_video  # noqa: E402
from tubedesk.db.client import StorageClient  # noqa: E402
from tubedesk.db.session import build_engine, init_db  # noqa: E402
from tubedesk.models.domain import NewVideo, VideoPatch  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "demo.db"

DEMO_VIDEOS = [
    NewVideo(youtube_id="dQw4w9WgXcQ", title="Demo upload one", published_at="2024-01-05T10:00:00Z"),
    NewVideo(youtube_id="9bZkp7q19f0", title="Demo upload two", published_at="2024-02-11T18:30:00Z"),
    NewVideo(youtube_id="kJQP7kiw5Fk", title="Demo upload three", published_at="2024-03-20T08:15:00Z"),
]


def main() -> int:
    """Seed the demo database.

    Returns:
        Exit code (0 for success).
    """
    engine = build_engine(f"sqlite:///{DEMO_DB_PATH}")
    init_db(engine)
    storage = StorageClient(engine)

    try:
        if list_videos(storage):
            print(f"Demo database already seeded: {DEMO_DB_PATH}")
            return 0

        created = [create_video(storage, video) for video in DEMO_VIDEOS]
        for video in created:
            print(f"Created video {video.id} ({video.youtube_id})")

        update_video(
            storage,
            created[0].id,
            VideoPatch(transcript="Demo transcript text.", summary="Demo summary."),
        )
        print(f"Added transcript and summary to {created[0].id}")
    finally:
        storage.close()

    print(f"Seeded {len(DEMO_VIDEOS)} videos into {DEMO_DB_PATH}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
