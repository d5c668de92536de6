"""
Ingestion Layer for Mixpanel event export.

This package turns Mixpanel raw exports into structured records.

Key Components:
- MixpanelAPIAdapter: Top properties lookups and streamed raw exports
- infer_schema / map_line: Schema inference and line-to-record mapping
- ExportPipeline: Runs one export from config to a record sink
"""
