"""Conversion pipeline for retail template spreadsheets.

Stages, leaves first
====================

**Detection** - ``retail_ingest.etl.detection``
    Keyword fingerprints classify the workbook and pick the sheet; the
    header locator then finds the label row inside that sheet.

**Normalization** - ``retail_ingest.etl.rows``
    Rows below the header become label-keyed mappings of trimmed values.

**Staging** - ``retail_ingest.etl.staging``
    One extractor per file type turns rows into canonical entity tables,
    applying dedup, fallback-chain and category-hierarchy rules.

**Serialization** - ``retail_ingest.etl.serialize``
    Tables are written as CSV with a fixed column order per table.

**Dispatch** - ``retail_ingest.etl.pipeline``
    Runs the stages above for one file and reports status events.

Data flows strictly forward; no stage mutates a predecessor's output.
"""
