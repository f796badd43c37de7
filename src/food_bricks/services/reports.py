"""Tabular food history reports."""

import logging
from pathlib import Path

import pandas as pd

from .classifier import Surface, classify, status_label
from .dashboard import DashboardAggregator

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "food",
    "category",
    "status",
    "passes",
    "reactions",
    "warnings",
    "first_trial",
    "last_trial",
    "bricks",
]


class ReportService:
    """Flattens dashboard food progress into a DataFrame for export."""

    def __init__(self, aggregator: DashboardAggregator):
        self.aggregator = aggregator

    def food_table(self, baby_id: str) -> pd.DataFrame:
        dashboard = self.aggregator.build(baby_id)
        rows = []
        for p in dashboard.food_progress:
            status = classify(p.brick_types, p.has_active_trial)
            rows.append({
                "food": p.food.name,
                "category": p.food.category.value if p.food.category else None,
                "status": status_label(status, Surface.REPORT),
                "passes": p.pass_count,
                "reactions": p.reaction_count,
                "warnings": p.warning_count,
                "first_trial": p.first_trial_date,
                "last_trial": p.last_trial_date,
                "bricks": " ".join(t.value for t in p.brick_types),
            })
        df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
        if not df.empty:
            df = df.sort_values("food", key=lambda s: s.str.lower()).reset_index(drop=True)
        return df

    def export_csv(self, baby_id: str, path: Path) -> Path:
        df = self.food_table(baby_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False, date_format="%Y-%m-%d")
        logger.info("Wrote %d food rows to %s", len(df), path)
        return path
