"""
Weather API service: concurrent multi-city current weather lookups.
"""

__version__ = "1.0.0"
