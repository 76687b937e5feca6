class AppError(Exception):
    """Base class for all application-level errors."""
    pass


class InvalidParameterError(AppError):
    """Raised at wiring time when a mandatory dependency is missing or invalid."""

    def __init__(self, parameter: str):
        self.parameter = parameter
        self.message = f"invalid parameter: {parameter}"
        super().__init__(self.message)


class DomainError(AppError):
    """Base for domain logic errors."""
    pass


class NotFoundError(DomainError):
    """Base for lookups of identifiers outside the registered set."""
    pass


class ProviderNotFoundError(NotFoundError):
    def __init__(self, provider: str = ""):
        self.provider = provider
        self.message = "provider not found"
        super().__init__(self.message)


class CategoryNotFoundError(NotFoundError):
    def __init__(self, category: str = ""):
        self.category = category
        self.message = "category not found"
        super().__init__(self.message)


class ParsingError(DomainError):
    def __init__(self, data) -> None:
        self.message = f"Couldn't parse data: {data}"
        super().__init__(self.message)


class InfrastructureError(AppError):
    """Base for infrastructure-related errors (upstream feeds, scheduler, etc)."""
    pass


class ExternalAPIError(InfrastructureError):
    def __init__(self, service: str, detail: str = ""):
        self.service = service
        self.message = f"Error with external service '{service}': {detail}"
        super().__init__(self.message)


class FeedFetchError(InfrastructureError):
    """A provider fetch failed; the original error is chained as __cause__."""

    def __init__(self, provider: str, category: str, detail: str = ""):
        self.provider = provider
        self.category = category
        self.message = f"failed to get {category} feed from {provider}: {detail}"
        super().__init__(self.message)
