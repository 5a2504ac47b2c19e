# (c) Copyright Datacraft, 2026
"""Archival image quality audit service."""
