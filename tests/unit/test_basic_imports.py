"""
Basic import smoke tests
"""

import pytest


@pytest.mark.unit
class TestBasicImports:
    """Every package imports and exposes its public objects"""

    def test_utils_imports(self):
        from utils import (
            config_manager, logging_manager, api_logger, db_logger, qm_logger,
            QodError, NotFoundError, ValidationError, day_offset, QueryValidator
        )
        assert config_manager is not None
        assert issubclass(NotFoundError, QodError)
        assert QueryValidator.MIN_SEARCH_TERM_LENGTH == 3

    def test_database_imports(self):
        from database import db_ops
        from database.models import Base
        assert set(Base.metadata.tables) == {"quotes", "sources"}
        assert db_ops is not None

    def test_api_imports(self):
        from api.app import app
        paths = set(app.openapi()["paths"])
        assert "/quotes/qod" in paths
        assert "/sources/{source_id}/quotes" in paths

    def test_manager_import(self):
        from quote_manager import quote_manager, QuoteManager
        assert isinstance(quote_manager, QuoteManager)
