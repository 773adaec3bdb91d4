"""GraphQL surface of the planet catalog."""
