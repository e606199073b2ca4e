"""
QOD Service Test Suite
======================

This package contains tests for the QOD service including:
- Unit tests for individual components
- Integration tests for the HTTP API against a real SQLite database
"""
