"""Ingestion layer.

This package contains the helpers that turn raw realtime service payloads
into typed vehicle records before they reach the merge engine.
"""

__all__: list[str] = []
