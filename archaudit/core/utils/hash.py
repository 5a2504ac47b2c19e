# (c) Copyright Datacraft, 2026
"""Utility for calculating BLAKE3 content hashes."""
from pathlib import Path

import blake3

CHUNK_SIZE = 65536


def calculate_blake3(file_path: Path | str) -> str:
	"""
	Calculate the BLAKE3 hash of a file.

	Args:
		file_path: Path to the file.

	Returns:
		The hex-encoded BLAKE3 hash.
	"""
	hasher = blake3.blake3()
	with open(file_path, "rb") as f:
		for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
			hasher.update(chunk)
	return hasher.hexdigest()
