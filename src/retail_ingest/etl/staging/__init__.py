"""Staging layer - entity extractors, one per upstream file type.

Each extractor folds the normalized rows of one sheet into a local
accumulator and returns immutable ``Table`` objects. No extractor reads or
writes shared state, so files can be extracted in parallel.

Output tables by file type
--------------------------
1. **Stores**: ``stores``
2. **Store items**: ``items`` + optional ``suppliers``
3. **Facts**: ``facts`` (item x store x date)
4. **Item master v1 / v2**: ``masteritems`` + optional ``barcodes``,
   ``brands``, ``dimensions``, ``erpcategories``, ``manufacturers``

An extractor returns an empty list when no row survives its
mandatory-field filter; that is a successful run with no output.
"""

from retail_ingest.etl.staging.facts import extract_facts
from retail_ingest.etl.staging.item_master import extract_item_master
from retail_ingest.etl.staging.item_master_v2 import extract_item_master_v2
from retail_ingest.etl.staging.store_items import extract_store_items
from retail_ingest.etl.staging.stores import extract_stores

__all__ = [
    "extract_facts",
    "extract_item_master",
    "extract_item_master_v2",
    "extract_store_items",
    "extract_stores",
]
