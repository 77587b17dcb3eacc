"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold protocol logic that spans several models and
    collaborators. They are stateless and shared across requests.
    """

    pass
