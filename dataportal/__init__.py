"""
Data portal front-end for a remote SOAP metadata search service.
"""

__version__ = "0.1.0"
