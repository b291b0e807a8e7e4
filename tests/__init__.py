"""
Test suite for spot_margin

Contains:
- tests/unit/          : Unit tests for individual modules
"""
