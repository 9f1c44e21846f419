"""Run the clinical analysis pipeline against a local video file."""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

from src.checkin.analysis.analysis_errors import AnalysisError
from src.checkin.config import AppConfig
from src.checkin.dependencies import build_pipeline
from src.checkin.logging import configure_logging
from src.checkin.media.media_models import UploadedMedia, normalize_video_mime_type
from src.checkin.pipeline.pipeline_service import AnalysisOutcome


async def run_analysis(path: Path, config: AppConfig) -> AnalysisOutcome:
    """Read ``path`` and push it through the pipeline."""
    content_type, _ = mimetypes.guess_type(path.name)
    media = UploadedMedia(
        payload=path.read_bytes(),
        filename=path.name,
        content_type=normalize_video_mime_type(content_type),
    )
    pipeline = build_pipeline(config)
    return await pipeline.analyze(media)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze a check-in video.")
    parser.add_argument("video", type=Path, help="Path to the video file.")
    parser.add_argument("--model", help="Override the Gemini model.")
    parser.add_argument(
        "--max-poll-attempts",
        type=int,
        help="Override the number of file status checks.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging()

    overrides: dict[str, object] = {}
    if args.model:
        overrides["gemini_model"] = args.model
    if args.max_poll_attempts:
        overrides["max_poll_attempts"] = args.max_poll_attempts
    config = AppConfig(**overrides)

    if not args.video.is_file():
        print(f"analysis failed: file not found: {args.video}", file=sys.stderr)
        return 1

    try:
        outcome = asyncio.run(run_analysis(args.video, config))
    except AnalysisError as exc:
        print(f"analysis failed [{exc.code.value}]: {exc.message}", file=sys.stderr)
        return 2

    print(json.dumps(outcome.to_payload(), indent=2, ensure_ascii=False), file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
