"""
HTTP API presentation layer.
"""
