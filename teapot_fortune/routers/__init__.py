"""Route groups for the Teapot Fortune service.

- fortune: the catch-all route answering every path and method
"""
