"""
Web application: pages, JSON endpoints and the search service client.
"""
