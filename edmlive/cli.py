#!/usr/bin/env python3
"""Command-line interface for browsing the EDM Liveset catalog."""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, List

from edmlive import __version__
from edmlive.core import EdmLiveCatalog, UnknownSectionError
from edmlive.dataclasses import EdmLiveConfig, RangeResult, TrackDetail, TrackSummary
from edmlive.loader import FetchError


def setup_logging(debug: bool = False):
    """Configure logging for CLI."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Browse and search livesets on edmliveset.com',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s sections
  %(prog)s browse classic-livesets --offset 20 --limit 10
  %(prog)s search "charlotte de witte"
  %(prog)s track edmlive:/charlotte-de-witte-awakenings-2024
  %(prog)s --json radio https://www.edmliveset.com/some-liveset/

Environment Variables:
  EDMLIVE_BASE_URL              Site origin
  EDMLIVE_TIMEOUT               Request timeout in seconds
  EDMLIVE_MAX_RETRIES           Retries for transient fetch failures
  EDMLIVE_MIN_REQUEST_INTERVAL  Minimum seconds between requests
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--json', action='store_true', help='Print results as JSON')
    parser.add_argument('--base-url', help='Site origin (default: from EDMLIVE_BASE_URL env var)')
    parser.add_argument('--timeout', type=float, help='Request timeout in seconds')
    parser.add_argument('--max-retries', type=int, help='Retries for transient fetch failures')

    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('sections', help='List browse sections with their latest tracks')

    browse = subparsers.add_parser('browse', help='List tracks in a browse section')
    browse.add_argument('section', help='Section id, e.g. livesets-dj-mixes')
    _add_range_arguments(browse)

    search = subparsers.add_parser('search', help='Search tracks')
    search.add_argument('query', help='Search query')
    _add_range_arguments(search)

    track = subparsers.add_parser('track', help='Show full detail for one track')
    track.add_argument('track', help='Track id or URL')

    radio = subparsers.add_parser('radio', help='Tracks to play after the given one')
    radio.add_argument('track', help='Track id or URL')

    return parser.parse_args(argv)


def _add_range_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--offset', type=int, default=0, help='Index of the first track (default: 0)')
    parser.add_argument('--limit', type=int, default=20, help='Number of tracks (default: 20)')


def create_config_from_args(args) -> EdmLiveConfig:
    """Create EdmLiveConfig from command-line arguments and environment variables."""
    config = EdmLiveConfig.from_env(os.environ)
    if args.base_url:
        config.base_url = args.base_url
    if args.timeout is not None:
        config.request_timeout = args.timeout
    if args.max_retries is not None:
        config.max_retries = args.max_retries
    return config


def format_duration(duration_ms: int) -> str:
    seconds = duration_ms // 1000
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}" if hours else f"{minutes}:{seconds:02d}"


def format_summary(summary: TrackSummary) -> str:
    line = f"{summary.title}  [{', '.join(summary.artists)}]"
    if summary.added_date:
        line += f"  ({summary.added_date})"
    return f"{line}\n    {summary.id}"


def print_range(result: RangeResult, offset: int) -> None:
    for index, summary in enumerate(result.items, offset + 1):
        print(f"{index:>4}. {format_summary(summary)}")
    more = f", next offset {result.next_offset}" if result.has_more else ""
    print(f"\n{len(result.items)} of ~{result.total} tracks{more}")


def print_detail(detail: TrackDetail) -> None:
    print(detail.title)
    print(f"  Artists:  {', '.join(detail.artists)}")
    if detail.genres:
        print(f"  Genres:   {', '.join(detail.genres)}")
    if detail.event:
        print(f"  Event:    {detail.event}")
    if detail.added_date:
        print(f"  Added:    {detail.added_date}")
    if detail.duration_ms:
        print(f"  Duration: {format_duration(detail.duration_ms)}")
    print(f"  Audio:    {detail.audio_url or 'not available'}")
    print(f"  URL:      {detail.url}")


def print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


async def run_command(args, config: EdmLiveConfig) -> None:
    async with EdmLiveCatalog(config) as catalog:
        if args.command == 'sections':
            page = await catalog.sections()
            if args.json:
                print_json([preview.to_dict() for preview in page.items])
                return
            for preview in page.items:
                print(f"== {preview.section.title} ({preview.section.id})")
                for summary in preview.items:
                    print(f"   {format_summary(summary)}")
                if preview.browse_more:
                    print(f"   ... more at {preview.external_uri}")
                print()

        elif args.command in ('browse', 'search'):
            if args.command == 'browse':
                result = await catalog.section_items(args.section, args.offset, args.limit)
            else:
                result = await catalog.search_tracks(args.query, args.offset, args.limit)
            if args.json:
                print_json(result.to_dict())
            else:
                print_range(result, max(0, args.offset))

        elif args.command == 'track':
            detail = await catalog.track(args.track)
            if args.json:
                print_json(detail.to_dict())
            else:
                print_detail(detail)

        elif args.command == 'radio':
            tracks: List[TrackSummary] = await catalog.radio(args.track)
            if args.json:
                print_json([summary.to_dict() for summary in tracks])
            else:
                for index, summary in enumerate(tracks, 1):
                    print(f"{index:>4}. {format_summary(summary)}")


def main(argv=None):
    """Main CLI entry point."""
    args = parse_args(argv)
    setup_logging(args.debug)
    logger = logging.getLogger(__name__)

    config = create_config_from_args(args)

    try:
        asyncio.run(run_command(args, config))
        return 0

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130

    except (FetchError, UnknownSectionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.error(f"Fatal error: {e}")
        if args.debug:
            raise
        return 1


if __name__ == '__main__':
    sys.exit(main())
