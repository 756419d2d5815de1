"""Differ, applier and run orchestration."""
