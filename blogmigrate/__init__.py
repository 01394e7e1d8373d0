"""
Blog data migration and integrity-validation engine.
"""
__version__ = "1.0.0"
