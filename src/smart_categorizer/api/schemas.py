from pydantic import BaseModel, Field

from smart_categorizer.models import CategorizationResult, CategorizationRule, ExactMatchEntry, TransactionInput


class CategorizeRequest(BaseModel):
    transaction: TransactionInput


class BatchCategorizeRequest(BaseModel):
    transactions: list[TransactionInput] = Field(default_factory=list)


class BatchCategorizeResponse(BaseModel):
    results: list[CategorizationResult]


class LearnRequest(BaseModel):
    transaction: TransactionInput
    category: str = Field(min_length=1)


class LearnResponse(BaseModel):
    learned: bool


class PayeeListResponse(BaseModel):
    payees: dict[str, ExactMatchEntry]


class PayeeMapping(BaseModel):
    payees: dict[str, str]


class PayeeImportResponse(BaseModel):
    imported: int


class RulesPayload(BaseModel):
    rules: list[CategorizationRule]


class ModelReloadRequest(BaseModel):
    path: str | None = None
