"""
Test suite for the geographic drill-down engine.
"""
