from bos.business.quotes.api import router
from bos.business.quotes.calculator import Totals, calculate_item_totals, calculate_quote_totals, round2
from bos.business.quotes.models import Quote, QuoteItem
from bos.business.quotes.schemas import QuoteCreate, QuoteItemCreate, QuoteItemRead, QuoteRead, QuoteUpdate
from bos.business.quotes.service import QuoteService, quote_service

__all__ = [
    "router",
    "Totals",
    "calculate_item_totals",
    "calculate_quote_totals",
    "round2",
    "Quote",
    "QuoteItem",
    "QuoteCreate",
    "QuoteItemCreate",
    "QuoteItemRead",
    "QuoteRead",
    "QuoteUpdate",
    "QuoteService",
    "quote_service",
]
