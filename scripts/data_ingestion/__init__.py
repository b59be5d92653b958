"""Data ingestion scripts for the NEC commuter data build.

- ingest_feeds.py: download and cache each agency's GTFS feed
"""
