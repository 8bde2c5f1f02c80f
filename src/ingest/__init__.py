"""Namespace walking and object fetch.

This module lists object store prefixes level by level and fetches
their leaf objects concurrently for the archive layer.
"""
