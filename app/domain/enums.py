"""Domain enums: user roles, report form types and report lifecycle status."""

from enum import Enum


class UserRole(str, Enum):
    """Role of an authenticated principal."""

    SYSTEMADMIN = "SYSTEMADMIN"
    ADMIN = "ADMIN"
    FRONTDESK = "FRONTDESK"
    MICRO = "MICRO"
    CHEMISTRY = "CHEMISTRY"
    QA = "QA"
    CLIENT = "CLIENT"


class FormType(str, Enum):
    """Report form type; decides the department letter of the report number."""

    MICRO_MIX = "MICRO_MIX"
    MICRO_MIX_WATER = "MICRO_MIX_WATER"
    STERILITY = "STERILITY"
    CHEMISTRY_MIX = "CHEMISTRY_MIX"
    COA = "COA"

    @property
    def department_letter(self) -> str:
        """'M' for microbiology forms, 'C' for chemistry forms."""
        if self in (FormType.CHEMISTRY_MIX, FormType.COA):
            return "C"
        return "M"


class ReportStatus(str, Enum):
    """Report lifecycle status.

    Allowed moves between statuses are defined in
    app.application.services.report_workflow.
    """

    DRAFT = "DRAFT"
    SUBMITTED_BY_CLIENT = "SUBMITTED_BY_CLIENT"
    UNDER_PRELIMINARY_TESTING_REVIEW = "UNDER_PRELIMINARY_TESTING_REVIEW"
    PRELIMINARY_TESTING_ON_HOLD = "PRELIMINARY_TESTING_ON_HOLD"
    PRELIMINARY_TESTING_NEEDS_CORRECTION = "PRELIMINARY_TESTING_NEEDS_CORRECTION"
    UNDER_CLIENT_PRELIMINARY_CORRECTION = "UNDER_CLIENT_PRELIMINARY_CORRECTION"
    PRELIMINARY_RESUBMISSION_BY_CLIENT = "PRELIMINARY_RESUBMISSION_BY_CLIENT"
    UNDER_QA_PRELIMINARY_REVIEW = "UNDER_QA_PRELIMINARY_REVIEW"
    QA_NEEDS_PRELIMINARY_CORRECTION = "QA_NEEDS_PRELIMINARY_CORRECTION"
    UNDER_CLIENT_PRELIMINARY_REVIEW = "UNDER_CLIENT_PRELIMINARY_REVIEW"
    CLIENT_NEEDS_PRELIMINARY_CORRECTION = "CLIENT_NEEDS_PRELIMINARY_CORRECTION"
    UNDER_PRELIMINARY_RESUBMISSION_TESTING_REVIEW = (
        "UNDER_PRELIMINARY_RESUBMISSION_TESTING_REVIEW"
    )
    PRELIMINARY_APPROVED = "PRELIMINARY_APPROVED"
    UNDER_FINAL_TESTING_REVIEW = "UNDER_FINAL_TESTING_REVIEW"
    FINAL_TESTING_ON_HOLD = "FINAL_TESTING_ON_HOLD"
    FINAL_TESTING_NEEDS_CORRECTION = "FINAL_TESTING_NEEDS_CORRECTION"
    UNDER_CLIENT_FINAL_CORRECTION = "UNDER_CLIENT_FINAL_CORRECTION"
    FINAL_RESUBMISSION_BY_CLIENT = "FINAL_RESUBMISSION_BY_CLIENT"
    UNDER_QA_FINAL_REVIEW = "UNDER_QA_FINAL_REVIEW"
    QA_NEEDS_FINAL_CORRECTION = "QA_NEEDS_FINAL_CORRECTION"
    RECEIVED_BY_FRONTDESK = "RECEIVED_BY_FRONTDESK"
    FRONTDESK_ON_HOLD = "FRONTDESK_ON_HOLD"
    UNDER_CLIENT_FINAL_REVIEW = "UNDER_CLIENT_FINAL_REVIEW"
    CLIENT_NEEDS_FINAL_CORRECTION = "CLIENT_NEEDS_FINAL_CORRECTION"
    UNDER_FINAL_RESUBMISSION_TESTING_REVIEW = "UNDER_FINAL_RESUBMISSION_TESTING_REVIEW"
    UNDER_FINAL_RESUBMISSION_QA_REVIEW = "UNDER_FINAL_RESUBMISSION_QA_REVIEW"
    FINAL_APPROVED = "FINAL_APPROVED"
    LOCKED = "LOCKED"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings."""
        return [status.value for status in cls]
