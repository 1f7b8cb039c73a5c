import importlib
import logging
from collections.abc import Mapping
from typing import Any, Dict, Type

from pydantic import BaseModel, ValidationError

from app.exceptions import InvalidResourceError
from app.models.fhir.types import FhirVersion

logger = logging.getLogger(__name__)

# Abstract base types of every resource, never sent as a resource themselves
ABSTRACT_RESOURCE_TYPES = {"Resource", "DomainResource"}

FHIR_PACKAGES: Dict[FhirVersion, str] = {
    FhirVersion.R4: "fhir.resources.R4B",
    FhirVersion.STU3: "fhir.resources.STU3",
}


class Validator:
    """
    Validates resources against the fhir.resources models of a FHIR version.
    """

    def __init__(self, fhir_version: FhirVersion | str) -> None:
        try:
            self.fhir_version = FhirVersion(fhir_version)
        except ValueError:
            raise ValueError(f"Unsupported FHIR version: {fhir_version}")

        self.__package = FHIR_PACKAGES[self.fhir_version]
        self.__resource_base: Type[BaseModel] = importlib.import_module(
            f"{self.__package}.resource"
        ).Resource
        self.__models: Dict[str, Type[BaseModel]] = {}

    def validate(self, resource_type: str, resource: Any) -> None:
        """
        Raises InvalidResourceError when the resource is not a valid resource of resource_type
        """
        if not isinstance(resource, Mapping):
            raise InvalidResourceError("Resource must be a JSON object")

        declared_type = resource.get("resourceType")
        if declared_type is None:
            raise InvalidResourceError("Resource is missing a resourceType")

        if declared_type != resource_type:
            raise InvalidResourceError(
                f"resourceType '{declared_type}' does not match type '{resource_type}'"
            )

        model = self.get_model(resource_type)
        try:
            model.model_validate(dict(resource))
        except ValidationError as e:
            logger.debug(f"Validation of {resource_type} failed: {e}")
            raise InvalidResourceError(
                f"Failed to parse request body as JSON resource. Error was: {e}"
            )

    def get_model(self, resource_type: str) -> Type[BaseModel]:
        """
        Returns the model class for resource_type. Resource types are case sensitive,
        data types such as HumanName are not accepted.
        """
        if resource_type in self.__models:
            return self.__models[resource_type]

        error = f"{resource_type} is not a valid resource type for FHIR {self.fhir_version.value}"
        if not resource_type.isalnum() or resource_type in ABSTRACT_RESOURCE_TYPES:
            raise InvalidResourceError(error)

        try:
            module = importlib.import_module(f"{self.__package}.{resource_type.lower()}")
        except ImportError:
            raise InvalidResourceError(error)

        model = getattr(module, resource_type, None)
        if not isinstance(model, type) or not issubclass(model, self.__resource_base):
            raise InvalidResourceError(error)

        self.__models[resource_type] = model
        return model

    def is_resource_type(self, resource_type: str) -> bool:
        try:
            self.get_model(resource_type)
        except InvalidResourceError:
            return False
        return True
