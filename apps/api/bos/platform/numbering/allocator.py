from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from bos.metrics import observe_business_id_allocated
from bos.platform.numbering.store import CounterStore
from bos.platform.numbering.templates import render_business_id


logger = logging.getLogger("bos.numbering")


@dataclass(slots=True)
class BusinessIdAllocator:
    """Formats human-facing identifiers from a counter option and a schema option."""

    store: CounterStore
    clock: Callable[[], date] = field(default=date.today)

    def get_next_available_id(self, counter_key: str, schema_key: str) -> str:
        schema = self.store.get_schema(schema_key)
        counter = self.store.get_counter(counter_key)
        return render_business_id(schema, counter, self.clock())

    def increase_counter(self, counter_key: str) -> None:
        self.store.increment_and_get(counter_key)

    def allocate(self, counter_key: str, schema_key: str) -> str:
        schema = self.store.get_schema(schema_key)
        claimed = self.store.increment_and_get(counter_key) - 1
        business_id = render_business_id(schema, claimed, self.clock())

        observe_business_id_allocated(counter_key)
        logger.info(
            "business_id.allocated",
            extra={"counter_key": counter_key, "business_id": business_id},
        )
        return business_id
