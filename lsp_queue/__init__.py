"""
Language Server Job Queue

A dual-lane job scheduler that feeds a single long-running compiler worker
through one serialized channel: fast-lane API mutations are coalesced per
resource and preempt ordinary requests, checks are deduplicated, and shutdown
drains everything.
"""

__version__ = "1.0.0"
