"""
Analysis Engine Module

Calculates risk/return metrics from monthly returns:
- Monthly returns and wealth index
- Volatility and Sharpe ratio (annualized)
- Correlation matrix
- Maximum drawdown
- Fixed-weight portfolio evaluation
"""

__version__ = "0.1.0"
