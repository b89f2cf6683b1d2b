"""
API server package: HTTP/REST interface.

Exposes token analysis to clients and delegates scoring to the analytics
layer. Use create_app() to build an app with explicit settings.
"""
