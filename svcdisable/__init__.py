"""
svcdisable - stop and disable host background services in parallel.
"""

__version__ = "0.1.0"
