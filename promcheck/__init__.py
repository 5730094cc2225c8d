"""
promcheck - end-to-end checks for Prometheus metrics endpoints
"""

__version__ = "0.1.0"
