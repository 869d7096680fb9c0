"""Detect optional columns of the todos table."""

from typing import Optional
from src.models.todo import SchemaCapabilities
from src.utils.config import get_table_name
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

STEP_COLUMN = "step"


async def probe_schema_capabilities(client, table: Optional[str] = None) -> SchemaCapabilities:
    """
    Check once whether the optional step column exists.

    Any failure (missing column, network, permissions) counts as the column
    being absent. Never raises.
    """
    table = table or get_table_name()
    try:
        await client.table(table).select(STEP_COLUMN).limit(1).execute()
    except Exception as e:
        logger.warning(
            "Step column unavailable, step values will be ignored",
            table=table,
            error=str(e),
            error_type=type(e).__name__,
        )
        return SchemaCapabilities(has_step=False)

    logger.info("Step column detected", table=table)
    return SchemaCapabilities(has_step=True)


class SchemaProbe:
    """Memoizes the capability snapshot for the lifetime of the instance."""

    def __init__(self, client, table: Optional[str] = None):
        self.client = client
        self.table = table or get_table_name()
        self._snapshot: Optional[SchemaCapabilities] = None

    async def capabilities(self) -> SchemaCapabilities:
        if self._snapshot is None:
            snapshot = await probe_schema_capabilities(self.client, self.table)
            # Concurrent first calls may both probe; the first result sticks
            if self._snapshot is None:
                self._snapshot = snapshot
        return self._snapshot

    async def capability(self) -> bool:
        """Whether the step column is available."""
        return (await self.capabilities()).has_step
