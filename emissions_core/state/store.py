"""
Report stores holding the current state of all emission reports

A store serializes the check and the application of changes per report
ID, so that two writers presenting the same tag can never both succeed:
the second writer's check always observes the first writer's change.
Readers don't take any lock. They receive immutable report snapshots,
since the state of a report is always replaced as one single step.
"""

import abc
import logging
import threading
import contextlib
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from . import validator
from .dataset import seed_reports
from .errors import ReportNotFound, WriteRejected
from .. import schemas


logger = logging.getLogger(__name__)


class ReportStore(abc.ABC):
    """
    Abstract store of emission reports

    Subclasses only implement plain access to the stored reports. The
    locking discipline and the validation of writes are done here.
    """

    def __init__(self):
        self._registry_lock = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}
        self._lock_users: Dict[int, int] = {}

    @contextlib.contextmanager
    def lock_for(self, report_id: int) -> Iterator[None]:
        """
        Hold the exclusive write lock of a single report ID

        A lock is only registered while writers hold it or wait for it,
        so the registry never grows beyond the number of concurrent writers.
        """

        with self._registry_lock:
            lock = self._locks.setdefault(report_id, threading.Lock())
            self._lock_users[report_id] = self._lock_users.get(report_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._registry_lock:
                self._lock_users[report_id] -= 1
                if self._lock_users[report_id] == 0:
                    del self._lock_users[report_id]
                    del self._locks[report_id]

    @contextlib.contextmanager
    def lock_all(self) -> Iterator[None]:
        """
        Hold the write locks of all report IDs, including the ones not registered yet
        """

        with self._registry_lock:
            with contextlib.ExitStack() as stack:
                for report_id in sorted(self._locks):
                    stack.enter_context(self._locks[report_id])
                yield

    @property
    def registered_locks(self) -> int:
        with self._registry_lock:
            return len(self._locks)

    @abc.abstractmethod
    def get(self, report_id: int) -> schemas.Report:
        """
        Return the current state of a report

        :raises ReportNotFound: when the report doesn't exist
        """

    @abc.abstractmethod
    def all(self) -> List[schemas.Report]:
        """
        Return the current state of all reports, ordered by ID
        """

    @abc.abstractmethod
    def _replace(self, previous: schemas.Report, updated: schemas.Report, checked: bool):
        """
        Replace the stored state of a report (called with the report's lock held)
        """

    @abc.abstractmethod
    def _load(self, reports: List[schemas.Report]):
        """
        Drop all stored reports and store the given ones (called with all locks held)
        """

    def compare_and_swap(
            self,
            report_id: int,
            expected_token: validator.ClientToken,
            changes: Mapping[str, Any]
    ) -> schemas.Report:
        """
        Apply the changes to a report if the expected tag is its current tag

        :param report_id: ID of the report that should be changed
        :param expected_token: entity tag(s) of the state the changes are based on
        :param changes: partial changes of editable fields
        :return: new state of the report
        :raises ReportNotFound: when the report doesn't exist
        :raises WriteRejected: when the expected tag is missing or stale
        """

        with self.lock_for(report_id):
            current = self.get(report_id)
            decision = validator.admit_write(current, expected_token)
            if isinstance(decision, validator.Rejected):
                logger.info(f"Rejected write on report {report_id}: {decision.reason.value}")
                raise WriteRejected(report_id, decision.reason, decision.token)
            updated = validator.apply_mutation(current, changes)
            self._replace(current, updated, True)
            logger.debug(f"Updated report {report_id} from {decision.token} to {validator.compute_token(updated)}")
            return updated

    def update(self, report_id: int, changes: Mapping[str, Any]) -> schemas.Report:
        """
        Apply the changes to a report without checking any precondition (last writer wins)
        """

        with self.lock_for(report_id):
            current = self.get(report_id)
            updated = validator.apply_mutation(current, changes)
            self._replace(current, updated, False)
            logger.debug(f"Unconditionally updated report {report_id}")
            return updated

    def reset(self, reports: Optional[Iterable[schemas.Report]] = None):
        """
        Replace all stored reports with the given ones (or the seed reports)
        """

        reports = list(reports) if reports is not None else seed_reports()
        with self.lock_all():
            self._load(reports)
        logger.info(f"Store has been reset to {len(reports)} reports")


class MemoryReportStore(ReportStore):
    """
    Report store keeping all reports in a process-local dictionary
    """

    def __init__(self, reports: Optional[Iterable[schemas.Report]] = None):
        super().__init__()
        self._reports: Dict[int, schemas.Report] = {}
        self.reset(reports)

    def get(self, report_id: int) -> schemas.Report:
        report = self._reports.get(report_id)
        if report is None:
            raise ReportNotFound(report_id)
        return report

    def all(self) -> List[schemas.Report]:
        return sorted(list(self._reports.values()), key=lambda r: r.id)

    def _replace(self, previous: schemas.Report, updated: schemas.Report, checked: bool):
        self._reports[updated.id] = updated

    def _load(self, reports: List[schemas.Report]):
        self._reports = {report.id: report for report in reports}
