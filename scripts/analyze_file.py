"""
Analyse one activity file from CLI.
"""

from __future__ import annotations

import argparse
import json
import mimetypes
import os
from pathlib import Path

from app.logging_utils import configure_logging
from app.services.analysis_service import get_analysis_service
from app.services.report_export_service import VALID_DATASETS, ReportExportService


def main() -> int:
    parser = argparse.ArgumentParser(description="Analyse a CSV or Excel user activity file.")
    parser.add_argument("path", help="Path to a .csv, .xls, or .xlsx file.")
    parser.add_argument(
        "--seed",
        dest="seed",
        type=int,
        default=None,
        help="Optional random seed for reproducible synthetic values.",
    )
    parser.add_argument(
        "--dataset",
        dest="dataset",
        choices=VALID_DATASETS,
        default=None,
        help="Print one flattened dataset instead of the summary.",
    )
    args = parser.parse_args()

    configure_logging(os.getenv("LOG_LEVEL", "WARNING"))

    path = Path(args.path)
    content_type, _ = mimetypes.guess_type(path.name)
    session = get_analysis_service().process_file(
        path.read_bytes(),
        filename=path.name,
        content_type=content_type,
        seed=args.seed,
    )

    if not session.succeeded:
        print(json.dumps({"succeeded": False, "failure_code": session.failure_code}, indent=2))
        return 1

    if args.dataset:
        result = ReportExportService().export(session, dataset=args.dataset)
        print(json.dumps(result.rows, indent=2, default=str))
        return 0

    payload = {
        "succeeded": True,
        "generated_at": session.generated_at.isoformat(),
        "field_map": session.field_map,
        "users": len(session.users),
        "personas": {
            persona.name: {
                "segment": persona.segment.value,
                "users": len(persona.users),
                "churn_risk": round(persona.churn_risk, 3),
            }
            for persona in session.personas
        },
        "metrics": {metric.title: round(metric.value, 2) for metric in session.metrics},
        "stories": [story.title for story in session.stories],
        "insights": [insight.title for insight in session.insights],
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
