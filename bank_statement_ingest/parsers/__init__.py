"""
Parsers sub-package for bank-statement-ingest.

Contains format-specific parsers that convert decoded statement content
into per-format raw transaction records.

Design: Strategy Pattern
- base.py defines the BaseParser ABC (protocol): is_supported() + parse().
- qfx.py implements QfxParser for OFX/QFX in both SGML and XML dialects,
  together with the semantic extractor that maps STMTTRN records to
  QfxTransaction.
- fields.py holds the strict date and amount coercion shared by parsers.

Each parser is bound to a FormatLayout from the registry (format_registry.py),
which lists the parsers in priority order for the builder.
"""
