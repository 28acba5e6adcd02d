"""Unipilot command-line interface."""
