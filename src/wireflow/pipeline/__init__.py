"""Incremental execution pipeline.

- resolver: dependency order for a target workflow
- hashing: execution fingerprints
- log_store: execution.json persistence
- staleness: fresh/stale decisions
- executor: isolated dependency execution
- driver: the pipeline state machine
"""
