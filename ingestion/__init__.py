"""
Data Ingestion Module

Handles fetching and validating price data:
- yfinance for adjusted close prices
- Price table assembly across symbols
"""

__version__ = "0.1.0"
