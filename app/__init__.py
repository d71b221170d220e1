"""
HTTP API for statement conversion.
"""
