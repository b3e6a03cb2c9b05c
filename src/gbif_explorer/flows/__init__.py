"""
Prefect flows for batch exports.

Flows:
- export: Fetch GBIF occurrences for a region, merge imported files and
  write GeoJSON, CSV or the species report

Usage (local):
    python -m gbif_explorer.flows.export

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'export-occurrences/default'

From the CLI:
    gbif-explorer export --region europe --taxon-key 212
"""
