"""Core (UI-agnostic) NHANES explorer logic.

This package contains:
- dataset loading (CSV -> pandas)
- selection normalization and the age/missing-value filter
- grouped statistics and summary projections (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
