"""
Bolivia CPI Tracker
スーパーの日次価格データから算出するボリビアの合成消費者物価指数（CPI）

Synthetic Consumer Price Index for Bolivia from daily supermarket prices
"""

__version__ = "2.1.0"
__author__ = "CPI Analytics Team"
__description__ = "Synthetic Bolivian CPI from daily Hipermaxi supermarket prices"
