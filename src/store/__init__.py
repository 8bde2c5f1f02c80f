"""Archive encoding and persistence layer.

This module turns fetched objects into gzip-compressed tar streams
and persists them to their destination all-or-nothing.
"""
