"""
Report store backed by a SQL database
"""

import logging
from typing import Iterable, List, Optional

import sqlalchemy

from . import database, models
from .. import schemas
from ..state import validator
from ..state.errors import ReportNotFound, WriteRejected
from ..state.store import ReportStore


logger = logging.getLogger(__name__)


class DatabaseReportStore(ReportStore):
    """
    Report store keeping all reports in the ``reports`` table of the configured database

    Writes within this process are serialized by the per-report locks of the
    base class. Additionally, every checked write only updates the row if it
    still contains exactly the previously read state, which detects changes
    of other processes sharing the same database between check and write.
    """

    def __init__(self, reports: Optional[Iterable[schemas.Report]] = None):
        super().__init__()
        with database.get_new_session() as session:
            empty = session.query(models.Report).first() is None
        if reports is not None or empty:
            self.reset(reports)

    def get(self, report_id: int) -> schemas.Report:
        with database.get_new_session() as session:
            obj = session.get(models.Report, report_id)
            if obj is None:
                raise ReportNotFound(report_id)
            return obj.schema

    def all(self) -> List[schemas.Report]:
        with database.get_new_session() as session:
            return [obj.schema for obj in session.query(models.Report).order_by(models.Report.id).all()]

    def _replace(self, previous: schemas.Report, updated: schemas.Report, checked: bool):
        statement = sqlalchemy.update(models.Report).where(models.Report.id == previous.id)
        if checked:
            statement = statement.where(*[
                getattr(models.Report, column) == value
                for column, value in models.Report.columns_of(previous).items()
            ])

        with database.get_new_session() as session:
            result = session.execute(statement.values(**models.Report.columns_of(updated)))
            if result.rowcount == 1:
                session.commit()
                return
            session.rollback()

        current = self.get(previous.id)
        logger.warning(f"Report {previous.id} has been modified concurrently by another process")
        raise WriteRejected(previous.id, validator.Reason.PRECONDITION_FAILED, validator.compute_token(current))

    def _load(self, reports: List[schemas.Report]):
        with database.get_new_session() as session:
            session.query(models.Report).delete()
            session.add_all([models.Report.from_schema(report) for report in reports])
            session.commit()
