"""HTTP API for pedibrief."""
