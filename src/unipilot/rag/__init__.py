"""Unipilot retrieval and answer pipeline."""
