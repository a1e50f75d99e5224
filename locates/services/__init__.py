"""
Locate services: ingestion, lifecycle, recycle bin and dashboard aggregation.
"""
