"""
Tests Package - Unit tests for the course importer.
===================================================

Test modules:
- test_config: Settings loading tests
- test_links: Cleaner and link extraction tests
- test_parsers: Format parser and dispatcher tests
- test_preview: Normalizer, validator, summary and session tests
- test_materializer: Embed, category, schedule and course building tests
- test_services: Commit, enhancement and upload client tests
- test_pipeline: End-to-end import tests
- test_cli: Command-line tests

Run tests with:
    pytest tests/
    pytest tests/ -v
"""
