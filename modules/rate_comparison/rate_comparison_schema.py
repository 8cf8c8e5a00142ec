from typing import List, Optional

from pydantic import BaseModel

from modules.rate_quote.rate_quote_schema import QuoteModel


class ProviderFailure(BaseModel):
    courier: str
    reason: str
    message: Optional[str] = None


class ComparisonResult(BaseModel):
    best_option: QuoteModel
    candidates: List[QuoteModel]
    failures: List[ProviderFailure] = []
