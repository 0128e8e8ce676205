"""
Stream Relay

Relays Wikimedia EventStreams edits into a message queue (ingestion service)
and drains that queue into structured logs (writer service).
"""

__version__ = "1.0.0"
