"""
Unit tests for the command-line entry point
"""

import json
import pytest

from main import QodSystem, create_parser


@pytest.mark.unit
class TestParser:
    """Test command-line parsing"""

    def test_api_defaults_to_config(self):
        args = create_parser().parse_args(["api"])
        assert args.command == "api"
        assert args.host is None
        assert args.port is None

    def test_qod_date(self):
        args = create_parser().parse_args(["qod", "--date", "1970-01-13"])
        assert args.date == "1970-01-13"

    def test_import_requires_file(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["import"])


@pytest.mark.unit
class TestQodSystem:
    """Test system commands against a temporary database"""

    @pytest.fixture
    def system(self, manager):
        system = QodSystem()
        system.manager = manager
        return system

    async def test_import_quotes(self, system, manager, tmp_path):
        quotes_file = tmp_path / "quotes.json"
        quotes_file.write_text(json.dumps([
            {"text": "Know thyself", "source": "Socrates"},
            {"text": "The unexamined life is not worth living", "source": "Socrates"},
            {"text": "Anonymous wisdom"},
        ]), encoding="utf-8")

        assert await system.import_quotes(str(quotes_file)) == 3

        stats = await manager.get_statistics()
        assert stats == {'total_quotes': 3, 'total_sources': 1, 'unattributed_quotes': 1}

    async def test_show_quote_of_day(self, system, seed, capsys):
        from datetime import date
        seed(["A", "B", "C", "D", "E"], source_name="Alphabet")

        await system.show_quote_of_day(date(1970, 1, 13))

        output = capsys.readouterr().out
        assert '"C"' in output
        assert "Alphabet" in output
