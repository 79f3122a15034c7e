"""
Record pipeline: structured-data extraction, description cleanup and the dataset sink.
"""

__version__ = "1.0.0"
