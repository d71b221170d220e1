"""
Core processing modules for the Funding Societies statement converter.

This package contains:
- builder: Transaction construction from classified statement blocks
- classifier: Line filtering and grouping into candidate blocks
- config: Application configuration and settings
- exceptions: Custom exception classes
- exporters: Ledger text rendering and spreadsheet register export
- extractor: pdftotext wrapper
- logger: Logging configuration
- normalize: Date and amount normalization
- parsing: End-to-end statement parsing
- schema: Pydantic models for statement and ledger data
"""
