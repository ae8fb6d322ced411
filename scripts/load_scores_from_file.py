#!/usr/bin/env python
"""
Load survey measurements from a JSON file into a running JSI API.

Reads a file holding either an array of measurement objects or an object with
a 'measurements' array. Each measurement needs worker_id, customer_id and a
'dimensions' object; other ScoreRequest fields are passed through. Each one is
POSTed to /api/v1/jsi/scores in timestamp order, then a baseline is
established for every customer seen.

Usage:
  python scripts/load_scores_from_file.py --file data/measurements.json
  python scripts/load_scores_from_file.py --file data/measurements.json --no-baseline
"""

import argparse
import json
import os
import sys
from pathlib import Path

import httpx

# Project root
ROOT = Path(__file__).resolve().parent.parent
DEFAULT_FILE = ROOT / "data" / "measurements.json"
DEFAULT_API_URL = os.environ.get("JSI_API_URL", "http://localhost:8000").rstrip("/")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Load JSI measurements from a JSON file into the API."
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=DEFAULT_FILE,
        help=f"Path to JSON file (default: {DEFAULT_FILE})",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=DEFAULT_API_URL,
        help=f"API base URL (default: {DEFAULT_API_URL})",
    )
    parser.add_argument(
        "--no-baseline",
        action="store_true",
        help="Skip establishing baselines after loading.",
    )
    args = parser.parse_args()

    path = args.file if args.file.is_absolute() else ROOT / args.file
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict) and "measurements" in data:
        measurements = data["measurements"]
    elif isinstance(data, list):
        measurements = data
    else:
        print("Error: JSON must be an array or an object with a 'measurements' key.", file=sys.stderr)
        sys.exit(1)

    # Trend is computed against the previous record, so order matters.
    measurements = sorted(measurements, key=lambda m: m.get("timestamp") or "")

    customers: set[str] = set()
    high_risk = 0
    loaded = 0
    api_url = args.api_url.rstrip("/")
    with httpx.Client(base_url=api_url, timeout=60.0) as client:
        for m in measurements:
            r = client.post("/api/v1/jsi/scores", json=m)
            if r.status_code != 201:
                print(f"Skipped {m.get('worker_id')}: {r.status_code} {r.text}", file=sys.stderr)
                continue
            record = r.json()
            loaded += 1
            customers.add(record["customer_id"])
            if record["risk_level"] == "high":
                high_risk += 1

        if not args.no_baseline:
            for customer_id in sorted(customers):
                r = client.post(f"/api/v1/jsi/customers/{customer_id}/baseline")
                if r.status_code == 200:
                    baseline = r.json()
                    print(
                        f"Baseline for {customer_id}: {baseline['overall_score']} "
                        f"({baseline['worker_count']} records)"
                    )
                else:
                    print(f"No baseline for {customer_id}: {r.json().get('detail')}", file=sys.stderr)

    print(f"Loaded {loaded}/{len(measurements)} measurements for {len(customers)} customers ({high_risk} high risk).")


if __name__ == "__main__":
    main()
