from bos.platform.numbering.allocator import BusinessIdAllocator
from bos.platform.numbering.store import CounterStore, InMemoryCounterStore, MissingOptionError, OptionCounterStore
from bos.platform.numbering.templates import SCHEMA_TOKENS, render_business_id

__all__ = [
    "BusinessIdAllocator",
    "CounterStore",
    "InMemoryCounterStore",
    "MissingOptionError",
    "OptionCounterStore",
    "SCHEMA_TOKENS",
    "render_business_id",
]
