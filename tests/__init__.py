"""
MetaWorks Test Suite
====================

Test organization:
- tests/unit/             - Auth, configuration and LLM helpers
- tests/services/portal/  - Portal services and routes against a mocked session

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest tests/services/portal    # Portal tests only
"""
