"""
Shared utilities - error handling, datetime parsing, atomic file writes.
"""
