"""
Infrastructure layer: configuration, logging and storage adapters.
"""
