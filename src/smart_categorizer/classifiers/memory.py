import json
import os
import threading
from collections.abc import Mapping
from datetime import datetime
from typing import Protocol

from pydantic import ValidationError

from smart_categorizer.logger import get_logger
from smart_categorizer.models import CategorizationResult, CategorizationSource, ExactMatchEntry
from smart_categorizer.tokenizer import payee_signature

from .base import ClassificationContext, Classifier

logger = get_logger(__name__)

EXACT_MATCH_CONFIDENCE = 0.95
MIN_SIGNATURE_LENGTH = 3


class PayeeRepository(Protocol):
    def load(self) -> dict[str, ExactMatchEntry]: ...

    def save(self, entries: Mapping[str, ExactMatchEntry]) -> None: ...


class JsonPayeeRepository:
    def __init__(self, data_path: str = "payees.json"):
        self.data_path = data_path

    def load(self) -> dict[str, ExactMatchEntry]:
        if not os.path.exists(self.data_path):
            return {}
        try:
            with open(self.data_path, encoding="utf-8") as f:
                raw = json.load(f)
            return {key: ExactMatchEntry.model_validate(value) for key, value in raw.items()}
        except (json.JSONDecodeError, ValidationError, AttributeError) as e:
            logger.warning("[PAYEES] Ignoring unreadable payee file %s: %s", self.data_path, e)
            return {}

    def save(self, entries: Mapping[str, ExactMatchEntry]) -> None:
        payload = {key: entry.model_dump(mode="json") for key, entry in entries.items()}
        tmp_path = f"{self.data_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.data_path)


class ExactMatchStore(Classifier):
    """
    Memoized payee signature -> category mappings.

    Readers work on whatever dict is current; writers build a new dict under
    a single lock and swap it in, so lookups never block and last write wins.
    """

    source = CategorizationSource.EXACT_MATCH

    def __init__(
        self,
        repository: PayeeRepository | None = None,
        entries: Mapping[str, ExactMatchEntry] | None = None,
    ):
        self.repository = repository
        self._lock = threading.Lock()
        if entries is not None:
            self._entries: dict[str, ExactMatchEntry] = dict(entries)
        elif repository is not None:
            self._entries = repository.load()
        else:
            self._entries = {}

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, signature: str) -> tuple[str, float] | None:
        entry = self._entries.get(signature)
        if entry is None:
            return None
        return entry.category, EXACT_MATCH_CONFIDENCE

    def record(self, payee: str, category: str) -> bool:
        """Remember a confirmed category for this payee. Returns False if the payee is too vague."""
        signature = payee_signature(payee)
        if len(signature) < MIN_SIGNATURE_LENGTH:
            logger.debug("[PAYEES] Not recording vague payee '%s'", payee)
            return False

        with self._lock:
            previous = self._entries.get(signature)
            hit_count = previous.hit_count + 1 if previous else 1
            entries = dict(self._entries)
            entries[signature] = ExactMatchEntry(
                category=category,
                hit_count=hit_count,
                last_used=datetime.now(),
            )
            self._commit(entries)

        if previous and previous.category != category:
            logger.info(
                "[PAYEES] '%s' corrected: %s -> %s", signature, previous.category, category
            )
        return True

    def forget(self, payee: str) -> bool:
        signature = payee_signature(payee)
        with self._lock:
            if signature not in self._entries:
                return False
            entries = dict(self._entries)
            del entries[signature]
            self._commit(entries)
        return True

    def export(self) -> dict[str, str]:
        return {key: entry.category for key, entry in self._entries.items()}

    def entries(self) -> dict[str, ExactMatchEntry]:
        return dict(self._entries)

    def import_entries(self, payees: Mapping[str, str]) -> int:
        imported = 0
        with self._lock:
            entries = dict(self._entries)
            for payee, category in payees.items():
                signature = payee_signature(payee)
                if len(signature) < MIN_SIGNATURE_LENGTH:
                    continue
                entries[signature] = ExactMatchEntry(category=category)
                imported += 1
            self._commit(entries)
        return imported

    def snapshot(self) -> "ExactMatchStore":
        """Copy of the current entries with no repository attached."""
        return ExactMatchStore(entries=self._entries)

    def __getstate__(self) -> dict:
        state = self.__dict__.copy()
        del state["_lock"]
        return state

    def __setstate__(self, state: dict) -> None:
        self.__dict__.update(state)
        self._lock = threading.Lock()

    def _commit(self, entries: dict[str, ExactMatchEntry]) -> None:
        if self.repository is not None:
            self.repository.save(entries)
        self._entries = entries

    def classify(self, context: ClassificationContext) -> CategorizationResult | None:
        tx = context.transaction
        for candidate in (tx.payee, tx.counterparty_iban, tx.description):
            if not candidate:
                continue
            hit = self.lookup(payee_signature(candidate))
            if hit:
                category, confidence = hit
                return CategorizationResult(
                    category=category,
                    confidence=confidence,
                    source=self.source,
                    matched_payee=candidate,
                )
        return None
