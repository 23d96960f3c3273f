"""Infrastructure layer: persistence, blob storage, HTTP integrations and observability."""
