from html import escape

from fhir.resources.R4B.operationoutcome import OperationOutcome

NARRATIVE_TEMPLATE = (
    '<div xmlns="http://www.w3.org/1999/xhtml"><h1>Operation Outcome</h1>'
    '<table border="0"><tr><td style="font-weight: bold;">{severity}</td>'
    "<td>[]</td><td><pre>{diagnostics}</pre></td></tr></table></div>"
)


class OperationsGenerator:
    @staticmethod
    def generate_operation_outcome(
        severity: str, code: str, diagnostics: str
    ) -> OperationOutcome:
        return OperationOutcome.model_validate(
            {
                "resourceType": "OperationOutcome",
                "text": {
                    "status": "generated",
                    "div": NARRATIVE_TEMPLATE.format(
                        severity=severity.upper(), diagnostics=escape(diagnostics)
                    ),
                },
                "issue": [
                    {
                        "severity": severity,
                        "code": code,
                        "diagnostics": diagnostics,
                    }
                ],
            }
        )

    @staticmethod
    def generate_successful_delete_operation(count: int = 1) -> OperationOutcome:
        """
        Returns the outcome of a successful delete, the deleted resource itself is never returned
        """
        return OperationsGenerator.generate_operation_outcome(
            "information", "informational", f"Successfully deleted {count} resource"
        )

    @staticmethod
    def generate_error(code: str, diagnostics: str) -> OperationOutcome:
        return OperationsGenerator.generate_operation_outcome("error", code, diagnostics)
