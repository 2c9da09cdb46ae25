"""
Decide whether one column of a CSV file holds human names and label its records with gender.
"""

import argparse
import csv
import json
import logging
import sys

from nameid.config import NameIdentifierConfig
from nameid.consts import DEFAULT_CHUNK_SIZE, DEFAULT_THRESHOLD, Keys
from nameid.identifier import HumanNameIdentifier

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Identify whether a CSV column contains human names.")
    parser.add_argument("--input_path", type=str, required=True, help="Path to the input CSV file (with header).")
    parser.add_argument("--column", type=str, required=True, help="Name of the text column to analyse.")
    parser.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD, help="Dictionary-hit threshold.")
    parser.add_argument("--names_path", type=str, default=None, help="Optional name dictionary word list.")
    parser.add_argument("--gender_path", type=str, default=None, help="Optional gender dictionary CSV.")
    parser.add_argument("--n_jobs", type=int, default=1, help="Number of parallel jobs to run.")
    parser.add_argument("--chunk_size", type=int, default=DEFAULT_CHUNK_SIZE, help="Records per parallel chunk.")
    parser.add_argument("--output_path", type=str, default=None, help="Optional path for per-record labels (CSV).")
    parser.add_argument("--verbose", action="store_true", help="Log the aggregated statistics.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(asctime)s %(levelname)s %(message)s"
    )

    config = NameIdentifierConfig.create_default().with_threshold(args.threshold)
    config = config.with_parallelism(args.n_jobs, args.chunk_size)
    if args.names_path or args.gender_path:
        config = config.with_dictionaries(
            args.names_path or config.name_dictionary_path, args.gender_path or config.gender_dictionary_path
        )

    with open(args.input_path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None or args.column not in reader.fieldnames:
            sys.exit(f"Column {args.column!r} not found in {args.input_path}")
        records = [row[args.column] or None for row in reader]

    model = HumanNameIdentifier(config).fit(records)
    print(json.dumps(dict(model.metadata), indent=2))

    if args.output_path:
        print(f"Writing labels to {args.output_path}")
        with open(args.output_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=[Keys.IS_NAME_INDICATOR, Keys.ORIGINAL_NAME, Keys.GENDER])
            writer.writeheader()
            for label in model.transform(records):
                writer.writerow(label)
