"""
Geographic drill-down engine for map charts.

This package provides tools for resolving drill-down levels, active data
columns and boundaries as a user navigates a map chart from country to state
to district and below.
"""

__version__ = "1.0.0"
__author__ = "Data Analytics Team"
