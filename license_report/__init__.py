"""license-report — enrich npm dependency records with license and provenance data."""

__version__ = "0.1.0"
