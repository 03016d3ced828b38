"""State/store layer.

This package is the single source of truth for the fetch window policy and
for how fetched batches are merged into the per-session vehicle buffer.
"""
