"""
Emissions core database models
"""

import datetime
from typing import Any, Dict

from sqlalchemy import Column, Date, DateTime, Double, Integer, String
from sqlalchemy.dialects import mysql

from .database import Base
from .. import schemas


def _to_naive_utc(timestamp: datetime.datetime) -> datetime.datetime:
    return timestamp.astimezone(datetime.timezone.utc).replace(tzinfo=None)


class Report(Base):
    """
    Model representing one emission report (timestamps are stored as naive UTC)

    Every column must keep the full precision of the schema: checked
    writes compare all stored columns with the previous state of the report.
    """

    __tablename__ = "reports"

    id = Column(Integer, nullable=False, primary_key=True, autoincrement=False)
    title = Column(String(255), nullable=False)
    description = Column(String(1023), nullable=False, default="")
    co2_total = Column(Double, nullable=False)
    status = Column(String(15), nullable=False, default=schemas.ReportStatus.DRAFT.value)
    created_at = Column(Date, nullable=False)
    updated_at = Column(DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql", "mariadb"), nullable=False)
    updated_by = Column(String(255), nullable=True)

    @property
    def schema(self) -> schemas.Report:
        """
        Pydantic schema representation of the database model that can be sent to clients
        """

        return schemas.Report(
            id=self.id,
            title=self.title,
            description=self.description,
            co2_total=self.co2_total,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at.replace(tzinfo=datetime.timezone.utc),
            updated_by=self.updated_by
        )

    @staticmethod
    def columns_of(report: schemas.Report) -> Dict[str, Any]:
        """
        Convert a report schema into a mapping of column names to column values
        """

        values = report.model_dump()
        values["status"] = report.status.value
        values["updated_at"] = _to_naive_utc(report.updated_at)
        return values

    @classmethod
    def from_schema(cls, report: schemas.Report) -> "Report":
        return cls(**cls.columns_of(report))

    def __repr__(self) -> str:
        return f"Report(id={self.id}, co2_total={self.co2_total}, updated_at={self.updated_at})"
