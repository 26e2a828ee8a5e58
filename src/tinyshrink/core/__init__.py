"""Scanning, remote compression and batch orchestration."""
