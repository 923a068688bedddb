from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

UNCATEGORIZED = "uncategorized"


class RuleType(str, Enum):
    EXACT = "exact"
    CONTAINS = "contains"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    REGEX = "regex"
    VARIABLE_SYMBOL = "variable_symbol"
    SPECIFIC_SYMBOL = "specific_symbol"
    CONSTANT_SYMBOL = "constant_symbol"


class CategorizationSource(str, Enum):
    RULE = "rule"
    EXACT_MATCH = "exact_match"
    ML = "ml"
    NONE = "none"


class TransactionInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    payee: str = ""
    description: str = ""
    amount: Decimal = Decimal("0")
    currency: str = "CZK"
    date: datetime = Field(default_factory=datetime.now)
    id: str | None = None
    counterparty_iban: str | None = None
    variable_symbol: str | None = None
    specific_symbol: str | None = None
    constant_symbol: str | None = None

    @property
    def combined_text(self) -> str:
        return " ".join(part for part in (self.payee, self.description) if part)


class CategorizationRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    pattern: str
    rule_type: RuleType
    category: str
    priority: int = 50
    enabled: bool = True
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.id


class CategorizationResult(BaseModel):
    category: str
    confidence: float = Field(ge=0.0, le=1.0)
    source: CategorizationSource
    rule_id: str | None = None
    matched_payee: str | None = None

    @classmethod
    def uncategorized(cls) -> "CategorizationResult":
        return cls(category=UNCATEGORIZED, confidence=0.0, source=CategorizationSource.NONE)

    @property
    def has_category(self) -> bool:
        return self.source != CategorizationSource.NONE


class ExactMatchEntry(BaseModel):
    category: str
    hit_count: int = 1
    last_used: datetime = Field(default_factory=datetime.now)


class EngineStats(BaseModel):
    active_rules: int
    learned_payees: int
    ml_classes: int
    ml_vocabulary_size: int
    model_loaded: bool
    ml_threshold: float
