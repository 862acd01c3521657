# tests/property/__init__.py
"""Property-based tests for dagdemo.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of.

Test categories:
- core/: DAG merge order independence, validation, derived queries and DOT shape
"""
