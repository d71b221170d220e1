"""
Service layer for business logic.

This package contains service classes that orchestrate statement
conversion: text extraction, parsing, rendering and export.
"""
