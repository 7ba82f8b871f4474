"""
Spellfixer Tests Package
========================
Test suite for the spelling engine.

Run all tests: python3 -m pytest tests/ -v
Run specific: python3 -m pytest tests/test_fixer.py -v
"""
