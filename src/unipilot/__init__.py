"""Unipilot: university prospectus search with grounded LLM answers."""
