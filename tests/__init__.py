"""Test suite for dicer-consensus.

Test organization:
- fixtures/: Mock cluster tables and test utilities
- unit/: Unit tests for individual modules

Run tests with:
    pytest tests/
    pytest tests/unit/
    pytest tests/ -v --tb=short
"""
