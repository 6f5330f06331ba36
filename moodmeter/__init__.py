"""
Mood Meter - A session mood aggregation service with HTTP and SSE support.

This package collects mood entries per session and renders them as a live
10x10 mood meter grid, pushed to clients as Server-Sent Events or HTML.
"""

__version__ = "0.1.0"
