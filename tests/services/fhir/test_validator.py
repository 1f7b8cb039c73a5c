import copy
from typing import Any, Dict

import pytest

from app.exceptions import InvalidResourceError
from app.services.fhir.validator import Validator
from tests.mock_data import invalid_patient, observation, practitioner


@pytest.fixture()
def validator() -> Validator:
    return Validator("4.0.1")


def test_validate_should_accept_valid_resources(
    validator: Validator, mock_patient: Dict[str, Any]
) -> None:
    validator.validate("Patient", mock_patient)
    validator.validate("Practitioner", practitioner)
    validator.validate("Observation", observation)


def test_validate_should_not_change_the_resource(
    validator: Validator, mock_patient: Dict[str, Any]
) -> None:
    original = copy.deepcopy(mock_patient)

    validator.validate("Patient", mock_patient)

    assert mock_patient == original


@pytest.mark.parametrize(
    "resource_type, resource",
    [
        ("Patient", invalid_patient),
        ("Patient", {"resourceType": "Practitioner"}),
        ("Patient", {"gender": "female"}),
        ("Patient", ["not", "an", "object"]),
        ("Foo", {"resourceType": "Foo"}),
        ("HumanName", {"resourceType": "HumanName", "family": "Jansen"}),
        ("patient", {"resourceType": "patient"}),
        ("DomainResource", {"resourceType": "DomainResource"}),
        ("Resource", {"resourceType": "Resource"}),
    ],
)
def test_validate_should_reject_invalid_resources(
    validator: Validator, resource_type: str, resource: Any
) -> None:
    with pytest.raises(InvalidResourceError):
        validator.validate(resource_type, resource)


def test_is_resource_type(validator: Validator) -> None:
    assert validator.is_resource_type("Patient") is True
    assert validator.is_resource_type("OperationOutcome") is True
    assert validator.is_resource_type("Foo") is False
    assert validator.is_resource_type("HumanName") is False
    assert validator.is_resource_type("Resource") is False
    assert validator.is_resource_type("DomainResource") is False
    assert validator.is_resource_type("../Patient") is False


def test_get_model_should_be_cached(validator: Validator) -> None:
    assert validator.get_model("Patient") is validator.get_model("Patient")


def test_stu3_validator_should_validate_against_stu3() -> None:
    validator = Validator("3.0.1")

    validator.validate("Patient", {"resourceType": "Patient", "gender": "male"})
    # MedicinalProductDefinition only exists in later FHIR versions
    assert validator.is_resource_type("MedicinalProductDefinition") is False


def test_unsupported_version_should_fail() -> None:
    with pytest.raises(ValueError):
        Validator("5.0.0")
