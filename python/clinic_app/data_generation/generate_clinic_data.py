#!/usr/bin/env python3
"""
Wellness+ Clinic Dashboard - Demo Data Generation Script

Generates synthetic clinic data and either writes one CSV file per table or
loads the rows straight into the Snowflake tables used by the dashboard.

    python -m clinic_app.data_generation.generate_clinic_data --patients 200
    python -m clinic_app.data_generation.generate_clinic_data --target snowflake
"""

import argparse
import csv
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List

import pandas as pd

from clinic_app.data_generation.clinic_data_generator import ClinicDataGenerator

logger = logging.getLogger(__name__)


def save_to_csv(rows: List[Dict], output_dir: Path, table: str) -> Path:
    """Save one table's rows to ``<output_dir>/<table>.csv``."""
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / f"{table}.csv"
    pd.DataFrame(rows).to_csv(filepath, index=False, quoting=csv.QUOTE_NONNUMERIC)
    print(f"   Saved {len(rows):,} records to {filepath.name}")
    return filepath


def write_csv_dataset(generator: ClinicDataGenerator, output_dir: str, patient_count: int,
                      appointments_per_patient: int) -> Dict[str, int]:
    dataset = generator.generate_dataset(patient_count, appointments_per_patient)
    directory = Path(output_dir)
    for table, rows in dataset.items():
        if rows:
            save_to_csv(rows, directory, table)
        else:
            print(f"   Warning: No data to save for {table}")
    return {table: len(rows) for table, rows in dataset.items()}


def load_into_snowflake(generator: ClinicDataGenerator, patient_count: int,
                        appointments_per_patient: int) -> Dict[str, int]:
    """Load generated rows through the dashboard's SnowflakeDataStore."""
    from snowflake.snowpark import Session

    from clinic_app.services.data_store import SnowflakeDataStore
    from clinic_app.services.entities import JSON_COLUMNS
    from clinic_app.utils import config

    db_config = config.get_database_config()
    connection_parameters = {
        'account': db_config.get('snowflake_account'),
        'user': os.getenv('SNOWFLAKE_USER'),
        'password': os.getenv('SNOWFLAKE_PASSWORD'),
        'database': db_config.get('snowflake_database'),
        'schema': db_config.get('snowflake_schema'),
        'warehouse': db_config.get('snowflake_warehouse'),
    }
    if db_config.get('snowflake_role'):
        connection_parameters['role'] = db_config['snowflake_role']

    session = Session.builder.configs(connection_parameters).create()
    try:
        store = SnowflakeDataStore(lambda: session, json_columns=JSON_COLUMNS)
        return generator.load_into(store, patient_count, appointments_per_patient)
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate Wellness+ clinic demo dataset")
    parser.add_argument("--patients", type=int, default=200,
                        help="Number of patients to generate (default: 200)")
    parser.add_argument("--appointments", type=int, default=2,
                        help="Average appointments per patient (default: 2)")
    parser.add_argument("--output-dir", type=str, default="data/demo_data",
                        help="Output directory for CSV files")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed for reproducible data generation")
    parser.add_argument("--target", choices=["csv", "snowflake"], default="csv",
                        help="Write CSV files or load into Snowflake (default: csv)")
    parser.add_argument("--test-run", action="store_true",
                        help="Generate small test dataset (10 patients)")
    return parser


def main(argv: List[str] = None) -> Dict[str, int]:
    """Main function to run data generation."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    if args.test_run:
        args.patients = 10
        print("🧪 Running in test mode with smaller dataset")

    print("🩺 Wellness+ Clinic Demo Data Generator")
    print("=" * 60)

    generator = ClinicDataGenerator(seed=args.seed)
    start_time = datetime.now()
    if args.target == "snowflake":
        stats = load_into_snowflake(generator, args.patients, args.appointments)
    else:
        stats = write_csv_dataset(generator, args.output_dir, args.patients, args.appointments)
    duration = datetime.now() - start_time

    print(f"\n⏱️  Generation completed in {duration}")
    for table, count in stats.items():
        print(f"   {table}: {count:,}")
    print(f"📊 Total rows: {sum(stats.values()):,}")
    return stats


if __name__ == "__main__":
    main()
