"""Shared helpers: structured logging, atomic file writes, locking."""
