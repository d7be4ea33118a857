"""
Emissions core exceptions raised by the report stores
"""

from .validator import Reason


class StateError(Exception):
    """
    Base class for any kind of problem of the report state
    """


class ReportNotFound(StateError, KeyError):
    """
    Exception raised if a report is unknown to a store
    """

    def __init__(self, report_id: int):
        super().__init__(report_id)
        self.report_id = report_id

    def __str__(self) -> str:
        return f"Report with ID {self.report_id!r} not found"


class WriteRejected(StateError):
    """
    Exception raised if a conditional write has been rejected by the validator

    The report has not been changed in this case. The attribute ``token``
    holds the entity tag of the report that was current during the check.
    """

    def __init__(self, report_id: int, reason: Reason, token: str):
        super().__init__(report_id, reason, token)
        self.report_id = report_id
        self.reason = reason
        self.token = token

    def __str__(self) -> str:
        return f"{self.reason.value} for report with ID {self.report_id!r} (current tag: {self.token})"
