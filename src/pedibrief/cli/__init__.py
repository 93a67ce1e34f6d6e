"""Command-line interface for pedibrief."""
