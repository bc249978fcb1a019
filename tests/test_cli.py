"""Tests for the command-line interface."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from edmlive.cli import create_config_from_args, format_duration, main, parse_args
from edmlive.dataclasses import TrackDetail
from edmlive.loader import FetchError


class TestCli:

    def test_range_arguments(self):
        args = parse_args(['browse', 'classic-livesets', '--offset', '20', '--limit', '5'])

        assert args.command == 'browse'
        assert args.section == 'classic-livesets'
        assert args.offset == 20
        assert args.limit == 5

    def test_config_overrides(self):
        args = parse_args(['--base-url', 'http://localhost:8000', '--max-retries', '0', 'search', 'techno'])

        with patch.dict('os.environ', {'EDMLIVE_TIMEOUT': '7'}, clear=True):
            config = create_config_from_args(args)

        assert config.base_url == 'http://localhost:8000'
        assert config.max_retries == 0
        assert config.request_timeout == 7.0

    def test_format_duration(self):
        assert format_duration(3723000) == "1:02:03"
        assert format_duration(150000) == "2:30"

    def test_fetch_error_exit_code(self, capsys):
        async def failing(args, config):
            raise FetchError("https://www.edmliveset.com/x/", 404)

        with patch('edmlive.cli.run_command', side_effect=failing):
            assert main(['track', 'edmlive:/x']) == 1

        assert "Failed to load https://www.edmliveset.com/x/: 404" in capsys.readouterr().err

    def test_track_json_includes_artist_ids(self, capsys):
        detail = TrackDetail(
            id="edmlive:/artbat-b2b-anyma-live-tomorrowland-2024",
            title="Artbat b2b Anyma - Live @ Tomorrowland 2024",
            url="https://www.edmliveset.com/artbat-b2b-anyma-live-tomorrowland-2024/",
            image=None,
            artists=["Artbat", "Anyma"],
        )
        catalog = MagicMock()
        catalog.track = AsyncMock(return_value=detail)

        with patch('edmlive.cli.EdmLiveCatalog') as catalog_cls:
            catalog_cls.return_value.__aenter__.return_value = catalog
            assert main(['--json', 'track', detail.id]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output['artists'] == ["Artbat", "Anyma"]
        assert output['artist_ids'] == ["artbat", "anyma"]
