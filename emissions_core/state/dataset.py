"""
Toy datasets served by the emissions core API
"""

import random
import datetime
from typing import List, Optional

from .. import schemas


COMPANIES = ["EcoTech", "GreenEnergy", "SustainCorp", "BioFutures", "EarthFriendly"]
SOURCES = ["electricity", "transportation", "manufacturing", "heating", "waste"]
START_DATE = datetime.date(2020, 1, 1)


def seed_reports() -> List[schemas.Report]:
    """
    Return the initial set of emission reports used after startup and every reset
    """

    return [
        schemas.Report(
            id=1,
            title="Informe Anual de Emisiones 2023",
            description="Análisis de la huella de carbono corporativa",
            co2_total=1500.5,
            status=schemas.ReportStatus.DRAFT,
            created_at=datetime.date(2023, 10, 15),
            updated_at=datetime.datetime(2023, 12, 20, 14, 30, tzinfo=datetime.timezone.utc)
        ),
        schemas.Report(
            id=2,
            title="Emisiones Q1 2024",
            description="Emisiones del primer trimestre",
            co2_total=420.8,
            status=schemas.ReportStatus.PUBLISHED,
            created_at=datetime.date(2024, 1, 15),
            updated_at=datetime.datetime(2024, 2, 2, 9, 15, tzinfo=datetime.timezone.utc)
        )
    ]


def generate_emissions(count: int, seed: Optional[int] = None) -> List[schemas.Emission]:
    """
    Generate a list of daily emission records, one per day starting at ``START_DATE``

    :param count: number of records to be generated
    :param seed: optional seed to create the same dataset on every call
    :return: list of emission records with IDs from 1 to ``count``
    """

    rng = random.Random(seed)
    return [
        schemas.Emission(
            id=i,
            company_id=rng.randint(1, len(COMPANIES)),
            company_name=rng.choice(COMPANIES),
            date=START_DATE + datetime.timedelta(days=i - 1),
            co2_tons=round(rng.uniform(50, 250), 1),
            source=rng.choice(SOURCES)
        )
        for i in range(1, count + 1)
    ]
