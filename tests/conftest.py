"""
pytest configuration and fixtures for QOD service tests
"""

import pytest
import sys
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import Mock, AsyncMock, patch

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fastapi.testclient import TestClient

from database.connection import DatabaseManager
from database.models import QuoteDB, SourceDB
from database.operations import DatabaseOperations
from quote_manager import QuoteManager


@pytest.fixture
def test_database(tmp_path):
    """Create a throwaway SQLite database with all tables"""
    connection = DatabaseManager(str(tmp_path / "test_qod.db"), echo=False)
    connection.initialize()
    connection.create_tables()

    yield connection

    connection.sync_engine.dispose()


@pytest.fixture
def db_operations(test_database):
    """DatabaseOperations bound to the test database"""
    return DatabaseOperations(test_database, auto_initialize=True)


@pytest.fixture
def manager(db_operations):
    """QuoteManager bound to the test database"""
    return QuoteManager(db_operations)


@pytest.fixture
def seed(test_database):
    """Factory inserting quotes (optionally sharing one source) synchronously"""
    def _seed(texts: List[str], source_name: Optional[str] = None) -> Dict[str, str]:
        with test_database.get_session() as session:
            source = None
            if source_name:
                source = SourceDB(name=source_name)
                session.add(source)
            quotes = [QuoteDB(text=text, source=source) for text in texts]
            session.add_all(quotes)
            session.commit()
            return {quote.text: quote.id for quote in quotes}
    return _seed


@pytest.fixture
def seed_source(test_database):
    """Factory inserting a single source, returning its id"""
    def _seed_source(name: str) -> str:
        with test_database.get_session() as session:
            source = SourceDB(name=name)
            session.add(source)
            session.commit()
            return source.id
    return _seed_source


@pytest.fixture
def client(manager):
    """Test client whose routes talk to the test database"""
    from api.app import app
    with patch('api.routes.quote_manager', manager):
        yield TestClient(app)


@pytest.fixture
def mock_manager():
    """QuoteManager double for route-level tests"""
    mock = Mock(spec=QuoteManager)
    for name in (
        'create_quote', 'list_quotes', 'search_quotes', 'get_random_quote',
        'get_quote_of_day', 'get_quote', 'replace_quote', 'replace_quote_text',
        'delete_quote', 'attach_source', 'detach_source', 'clear_source',
        'create_source', 'list_sources', 'get_source', 'update_source',
        'delete_source', 'list_source_quotes', 'get_statistics',
    ):
        setattr(mock, name, AsyncMock())
    return mock


@pytest.fixture
def mock_client(mock_manager):
    """Test client whose routes talk to a mocked manager"""
    from api.app import app
    with patch('api.routes.quote_manager', mock_manager):
        yield TestClient(app)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
