# tests/fixtures/__init__.py
"""Shared test doubles for dagdemo tests.

- harness: instrumented node harnesses and factories with injectable failures
"""
