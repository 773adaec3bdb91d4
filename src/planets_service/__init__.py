"""Planets catalog service.

Key Responsibilities:
    - Serve the planet catalog through a GraphQL query, mutation and
      subscription API
    - Batch nested detail lookups per request and broadcast newly created
      planets to live subscribers

Collaborators:
    - Upstream: ASGI servers and the ``planets-service`` command line entry point
    - Downstream: ``planets_service`` subpackages (gateway, services, storage)

Example:
    >>> from planets_service.gateway import create_app
    >>> app = create_app()
"""

__version__ = "0.1.0"


__all__ = ["__version__"]
