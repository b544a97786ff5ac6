#!/usr/bin/env python3
"""Enqueue a video conversion task for local testing.

Usage:
    python scripts/enqueue_video_task.py --video-id 42 --path /data/42
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

import asyncpg
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from video_converter.config import get_task_entrypoint
from video_converter.queue import create_queries
from video_converter.schemas import VideoTask


async def enqueue_video_task(video_id: int, path: str, entrypoint: str) -> None:
    """Enqueue one VideoTask payload on the task entrypoint."""
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("❌ DATABASE_URL not set")
        sys.exit(1)

    task = VideoTask(video_id=video_id, path=path)
    pool = await asyncpg.create_pool(
        dsn=database_url.replace("postgresql+asyncpg://", "postgresql://", 1),
        min_size=1,
        max_size=1,
    )
    try:
        job_ids = await create_queries(pool).enqueue(
            entrypoint, task.model_dump_json().encode()
        )
    finally:
        await pool.close()

    print(f"✅ Enqueued video {video_id} on '{entrypoint}' (job {job_ids[0]})")


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Enqueue a video conversion task")
    parser.add_argument("--video-id", type=int, required=True, help="Video identifier")
    parser.add_argument("--path", required=True, help="Directory holding the chunk files")
    parser.add_argument(
        "--entrypoint",
        default=None,
        help="Entrypoint name (default: TASK_ENTRYPOINT or 'convert_video')",
    )
    args = parser.parse_args()

    if not Path(args.path).is_dir():
        print(f"⚠️  {args.path} is not a directory on this machine", file=sys.stderr)

    asyncio.run(
        enqueue_video_task(args.video_id, args.path, args.entrypoint or get_task_entrypoint())
    )


if __name__ == "__main__":
    main()
