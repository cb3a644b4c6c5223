"""
Summary — order totals block, recomputed from stored fields.

    from cartflow import summary as Y

    block = Y.project(order)
    if block.mismatch:
        warn(block.mismatch.message)
"""

from __future__ import annotations

from cartflow.summary._project import OrderSummary, project, verify

__all__ = ("OrderSummary", "project", "verify")
