"""
Test suite for the unfulfilled orders backend.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_unfulfilled_priority.py -v
"""
