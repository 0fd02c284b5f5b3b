"""
Create index tables and helper SQL functions.

Creates the tables owned by the indexing service and installs
get_embedding_extracted_data(), which returns a queue entry's
extracted_data with the records array capped server-side.

Usage: python -m compliance_index.boundary.db.create_tables

Dependencies: sqlalchemy, compliance_index.boundary.db
System role: Schema bootstrap for local and staging databases
"""

import asyncio
import logging

from sqlalchemy import text

from compliance_index.boundary.db.base import Base
from compliance_index.boundary.db.connection import get_async_engine
from compliance_index.boundary.db import models  # noqa: F401  (register tables)
from compliance_index.observability.logger import configure_logging

logger = logging.getLogger(__name__)

EXTRACTED_DATA_FUNCTION = """
CREATE OR REPLACE FUNCTION get_embedding_extracted_data(
  p_queue_id uuid,
  p_max_records int DEFAULT 20
)
RETURNS jsonb
LANGUAGE sql STABLE
AS $$
  SELECT
    CASE
      WHEN extracted_data IS NULL THEN NULL
      WHEN extracted_data->'records' IS NULL THEN extracted_data
      WHEN jsonb_typeof(extracted_data->'records') <> 'array' THEN extracted_data
      WHEN jsonb_array_length(extracted_data->'records') <= p_max_records THEN extracted_data
      ELSE (
        (extracted_data - 'records') ||
        jsonb_build_object(
          'records', (
            SELECT COALESCE(jsonb_agg(r), '[]'::jsonb)
            FROM (
              SELECT r
              FROM jsonb_array_elements(extracted_data->'records') AS r
              LIMIT p_max_records
            ) sub
          ),
          'records_truncated', true,
          'records_total', jsonb_array_length(extracted_data->'records')
        )
      )
    END
  FROM file_processing_queue
  WHERE id = p_queue_id;
$$;
"""


async def create_tables() -> None:
    """Create all tables and the extracted_data helper function."""
    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text(EXTRACTED_DATA_FUNCTION))
    await engine.dispose()
    logger.info("%s:create_tables - Tables and functions created", __name__)


if __name__ == "__main__":
    configure_logging()
    asyncio.run(create_tables())
