"""Phase orchestration scripts for the NEC commuter data build.

 - build_commuter_data.py: ingest (cache-aware) + build + write commuter-data.json
"""
