"""Framework layer: configuration, logging, startup checks, identifiers."""
