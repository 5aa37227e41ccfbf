"""
Test suite for the Storefront Admin API.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run one area: pytest tests/unit/test_order_service.py -v
"""
