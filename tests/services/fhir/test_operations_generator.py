from app.services.fhir.operations_generator import OperationsGenerator


def test_successful_delete_operation() -> None:
    outcome = OperationsGenerator.generate_successful_delete_operation()

    assert len(outcome.issue) == 1
    assert outcome.issue[0].severity == "information"
    assert outcome.issue[0].code == "informational"
    assert outcome.issue[0].diagnostics == "Successfully deleted 1 resource"
    assert outcome.text is not None
    assert outcome.text.status == "generated"


def test_generate_error_should_escape_narrative() -> None:
    outcome = OperationsGenerator.generate_error("invalid", "<script> is not a resource")

    assert outcome.issue[0].severity == "error"
    assert outcome.issue[0].code == "invalid"
    assert outcome.issue[0].diagnostics == "<script> is not a resource"
    assert "&lt;script&gt;" in outcome.text.div
