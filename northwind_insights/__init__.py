"""
Northwind Sales Insights

Sales and customer reports over a Northwind-style dataset.
"""

__version__ = "1.0.0"
