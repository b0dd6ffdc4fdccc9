"""Example: Converting a folder of retail exports

This example demonstrates the two ways of driving the converter:
1. One file at a time, with a status callback and in-memory results
2. A whole folder in one batch, bundled into a dated ZIP archive

Prerequisites:
- Put .xlsx/.xls exports (Stores, Store Items, Facts, Masteritems) in exports/
- Install the xls extra for legacy .xls files: pip install retail-ingest[xls]
"""

from datetime import date
from pathlib import Path

from retail_ingest import CsvGenerationOptions, StatusUpdate, convert_file
from retail_ingest.batch import collect_input_files, run_batch

input_dir = Path("exports")  # MODIFY AS NEEDED
output_dir = Path("out")
run_date = date.today()

# Skip the optional brand and dimension tables
options = CsvGenerationOptions.from_mapping({"brands": False, "dimensions": False})


def show(update: StatusUpdate) -> None:
    print(f"  [{update.status}] {update.message}")


# Example 1: Single file
files = collect_input_files(input_dir)
print(f"Example 1: {files[0].name}")
print("-" * 60)
result = convert_file(files[0], status=show, options=options, run_date=run_date)
print(f"Detected: {result.detected_type.label} (sheet {result.sheet_name!r})")
for csv_file in result.csv_files:
    rows = csv_file.content.count("\n") - 1
    print(f"  {csv_file.name}: {rows} rows")
print()

# Example 2: Whole folder into one archive
print("Example 2: Batch")
print("-" * 60)
batch = run_batch(
    files,
    output_dir,
    archive_name="weekly_export",
    options=options,
    run_date=run_date,
    max_workers=4,
)
for outcome in batch.outcomes:
    print(f"  {outcome.path.name}: {outcome.status} ({len(outcome.csv_files)} tables)")
for error in batch.errors:
    print(f"  {error}")
print(f"Archive: {batch.archive_path}")
