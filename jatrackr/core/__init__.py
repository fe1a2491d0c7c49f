"""
Core layer: domain models, lifecycle interfaces and error types.
"""
