"""
Synchronization engine: language detection, checksums, reconciliation and the
generated index.
"""
