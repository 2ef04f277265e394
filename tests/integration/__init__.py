"""
Integration tests package.

- SQL repositories against an in-process SQLite database
- Health check endpoints

To run only the integration tests:
    pytest tests/integration/
"""
