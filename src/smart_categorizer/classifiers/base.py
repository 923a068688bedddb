from abc import ABC, abstractmethod
from dataclasses import dataclass

from smart_categorizer import tokenizer
from smart_categorizer.models import CategorizationResult, CategorizationSource, TransactionInput
from smart_categorizer.tokenizer import PaymentSymbols


@dataclass(frozen=True)
class ClassificationContext:
    """Per-call view of a transaction, normalized once and shared by every stage."""

    transaction: TransactionInput
    terms: tuple[str, ...]
    normalized_text: str
    payee_simple: str
    symbols: PaymentSymbols

    @classmethod
    def from_transaction(cls, transaction: TransactionInput) -> "ClassificationContext":
        terms = tuple(tokenizer.normalize(transaction.combined_text))
        return cls(
            transaction=transaction,
            terms=terms,
            normalized_text=" ".join(terms),
            payee_simple=tokenizer.simple_normalize(transaction.payee),
            symbols=tokenizer.extract_symbols(transaction.combined_text),
        )

    @property
    def variable_symbol(self) -> str | None:
        return self.transaction.variable_symbol or self.symbols.variable_symbol

    @property
    def specific_symbol(self) -> str | None:
        return self.transaction.specific_symbol or self.symbols.specific_symbol

    @property
    def constant_symbol(self) -> str | None:
        return self.transaction.constant_symbol or self.symbols.constant_symbol


class Classifier(ABC):
    source: CategorizationSource

    @abstractmethod
    def classify(self, context: ClassificationContext) -> CategorizationResult | None:
        """Attempt to categorize the transaction; None defers to the next stage."""
        pass
