class FhirError(Exception):
    """
    Base class for every error the resource handler and its collaborators raise.
    """

    status_code: int = 500
    issue_code: str = "exception"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidResourceError(FhirError):
    """
    Raised when a resource does not conform to the FHIR schema of its type.
    """

    status_code = 400
    issue_code = "invalid"


class InvalidSearchParameterError(FhirError):
    status_code = 400
    issue_code = "invalid"


class UnauthorizedError(FhirError):
    status_code = 403
    issue_code = "forbidden"


class ResourceNotFoundError(FhirError):
    status_code = 404
    issue_code = "not-found"

    def __init__(self, resource_type: str, id: str, message: str | None = None) -> None:
        super().__init__(message or f"Resource {resource_type}/{id} is not known")
        self.resource_type = resource_type
        self.id = id


class ResourceVersionNotFoundError(FhirError):
    status_code = 404
    issue_code = "not-found"

    def __init__(self, resource_type: str, id: str, vid: str) -> None:
        super().__init__(f"Version {vid} of resource {resource_type}/{id} is not known")
        self.resource_type = resource_type
        self.id = id
        self.vid = vid


class UnsupportedResourceTypeError(FhirError):
    status_code = 404
    issue_code = "not-supported"

    def __init__(self, resource_type: str) -> None:
        super().__init__(f"Resource type {resource_type} is not supported")
        self.resource_type = resource_type


class ResourceVersionConflictError(FhirError):
    status_code = 409
    issue_code = "conflict"
