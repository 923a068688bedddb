import dataclasses
import os
import threading
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from itertools import repeat

from smart_categorizer.classifiers.base import ClassificationContext, Classifier
from smart_categorizer.classifiers.memory import ExactMatchStore, JsonPayeeRepository
from smart_categorizer.classifiers.naive_bayes import (
    DEFAULT_THRESHOLD,
    NaiveBayesClassifier,
    NaiveBayesModel,
    load_model,
)
from smart_categorizer.classifiers.rules import RuleEngine
from smart_categorizer.core import settings
from smart_categorizer.default_rules import get_default_rules
from smart_categorizer.errors import ModelLoadError
from smart_categorizer.logger import get_logger
from smart_categorizer.models import (
    CategorizationResult,
    CategorizationRule,
    EngineStats,
    TransactionInput,
)
from smart_categorizer.services.rule_repository import JsonRuleRepository

logger = get_logger(__name__)

PROCESS_BATCH_MIN_SIZE = 256


def run_stages(stages: Sequence[Classifier], transaction: TransactionInput) -> CategorizationResult:
    """Walk the stages in order; the first one that answers wins."""
    context = ClassificationContext.from_transaction(transaction)

    for stage in stages:
        result = stage.classify(context)
        if result is not None:
            logger.debug(
                "[ENGINE] %s -> '%s' via %s (%.2f)",
                transaction.payee[:50],
                result.category,
                result.source.value,
                result.confidence,
            )
            return result

    logger.debug("[ENGINE] No stage matched '%s'", transaction.payee[:50])
    return CategorizationResult.uncategorized()


def categorize_chunk(
    stages: Sequence[Classifier], transactions: Sequence[TransactionInput]
) -> list[CategorizationResult]:
    return [run_stages(stages, tx) for tx in transactions]


@dataclass(frozen=True)
class EngineSnapshot:
    """Rules and model as seen by one classification call; replaced wholesale, never edited."""

    rules: RuleEngine
    ml: NaiveBayesClassifier


class CategorizationEngine:
    """
    Waterfall categorization: rules, then learned payees, then the Naive Bayes model,
    falling back to "uncategorized". The classification path never writes anything.
    """

    def __init__(
        self,
        rules: Iterable[CategorizationRule] = (),
        exact_match: ExactMatchStore | None = None,
        model: NaiveBayesModel | None = None,
        ml_threshold: float = DEFAULT_THRESHOLD,
        batch_workers: int = settings.DEFAULT_BATCH_WORKERS,
        default_rules: Sequence[CategorizationRule] = (),
        rule_repository: JsonRuleRepository | None = None,
    ):
        self.exact_match = exact_match if exact_match is not None else ExactMatchStore()
        self.batch_workers = max(1, batch_workers)
        self.default_rules = tuple(default_rules)
        self.rule_repository = rule_repository
        self._user_rules = tuple(rules)
        self._admin_lock = threading.Lock()
        self._snapshot = EngineSnapshot(
            rules=RuleEngine([*self.default_rules, *self._user_rules]),
            ml=NaiveBayesClassifier(model, threshold=ml_threshold),
        )

    @classmethod
    def from_settings(cls, config: settings.EngineSettings | None = None) -> "CategorizationEngine":
        config = config or settings.get_settings()
        settings.ensure_dir(config.data_dir)

        rule_repository = JsonRuleRepository(config.rules_path)
        exact_match = ExactMatchStore(repository=JsonPayeeRepository(config.payees_path))

        model = None
        if os.path.exists(config.model_path):
            try:
                model = load_model(config.model_path)
            except ModelLoadError as e:
                logger.error("[ENGINE] ML model unusable, ML stage disabled: %s", e)
        else:
            logger.warning(
                "[ENGINE] No ML model at %s, ML stage disabled. Run smart-categorizer-train.",
                config.model_path,
            )

        engine = cls(
            rules=rule_repository.load(),
            exact_match=exact_match,
            model=model,
            ml_threshold=config.ml_threshold,
            batch_workers=config.batch_workers,
            default_rules=get_default_rules() if config.use_default_rules else (),
            rule_repository=rule_repository,
        )
        logger.info("[ENGINE] Ready: %s", engine.stats().model_dump())
        return engine

    @property
    def snapshot(self) -> EngineSnapshot:
        return self._snapshot

    @property
    def user_rules(self) -> list[CategorizationRule]:
        return list(self._user_rules)

    def stages(self, snapshot: EngineSnapshot) -> tuple[Classifier, ...]:
        return (snapshot.rules, self.exact_match, snapshot.ml)

    def categorize(self, transaction: TransactionInput) -> CategorizationResult:
        return run_stages(self.stages(self._snapshot), transaction)

    def categorize_batch(self, transactions: Sequence[TransactionInput]) -> list[CategorizationResult]:
        """
        Categorize independent transactions, preserving input order.

        Batches of at least PROCESS_BATCH_MIN_SIZE are split into contiguous chunks and
        classified in a process pool so they use more than one core. Each worker gets a
        pickled copy of the current rules, learned payees and model.
        """
        workers = min(self.batch_workers, len(transactions))
        if workers <= 1 or len(transactions) < PROCESS_BATCH_MIN_SIZE:
            return [self.categorize(tx) for tx in transactions]

        snapshot = self._snapshot
        stages = (snapshot.rules, self.exact_match.snapshot(), snapshot.ml)
        chunk_size = -(-len(transactions) // workers)
        chunks = [
            list(transactions[start:start + chunk_size])
            for start in range(0, len(transactions), chunk_size)
        ]
        logger.debug("[ENGINE] Batch of %s in %s processes", len(transactions), len(chunks))
        with ProcessPoolExecutor(max_workers=len(chunks)) as pool:
            results = pool.map(categorize_chunk, repeat(stages), chunks)
            return [result for chunk in results for result in chunk]

    def learn(self, transaction: TransactionInput, category: str) -> bool:
        """
        Record a confirmed or corrected category under the payee and the counterparty
        IBAN. The description is used only when the transaction has neither.
        """
        keys = [k for k in (transaction.payee, transaction.counterparty_iban) if k]
        if not keys and transaction.description:
            keys = [transaction.description]

        learned = False
        for key in keys:
            if self.exact_match.record(key, category):
                logger.info("[ENGINE] Learned '%s' -> %s", key, category)
                learned = True
        return learned

    def forget_payee(self, payee: str) -> bool:
        return self.exact_match.forget(payee)

    def export_payees(self) -> dict[str, str]:
        return self.exact_match.export()

    def import_payees(self, payees: Mapping[str, str]) -> int:
        imported = self.exact_match.import_entries(payees)
        logger.info("[ENGINE] Imported %s learned payees", imported)
        return imported

    def update_rules(self, rules: Iterable[CategorizationRule]) -> list[CategorizationRule]:
        """
        Replace the user rules. The whole set is compiled before anything changes;
        a RuleCompileError leaves both the stored and the active rules untouched.
        """
        user_rules = tuple(rules)
        with self._admin_lock:
            rule_engine = RuleEngine([*self.default_rules, *user_rules])
            if self.rule_repository is not None:
                self.rule_repository.save(user_rules)
            self._user_rules = user_rules
            self._snapshot = dataclasses.replace(self._snapshot, rules=rule_engine)
        logger.info("[ENGINE] Rules updated: %s active", rule_engine.active_rule_count)
        return list(user_rules)

    def set_model(self, model: NaiveBayesModel | None) -> None:
        with self._admin_lock:
            threshold = self._snapshot.ml.threshold
            self._snapshot = dataclasses.replace(
                self._snapshot, ml=NaiveBayesClassifier(model, threshold=threshold)
            )

    def reload_model(self, path: str) -> NaiveBayesModel:
        """Swap in the model stored at path. On ModelLoadError the current model stays active."""
        model = load_model(path)
        self.set_model(model)
        return model

    def stats(self) -> EngineStats:
        snapshot = self._snapshot
        return EngineStats(
            active_rules=snapshot.rules.active_rule_count,
            learned_payees=len(self.exact_match),
            ml_classes=snapshot.ml.num_classes(),
            ml_vocabulary_size=snapshot.ml.vocabulary_size(),
            model_loaded=snapshot.ml.has_model,
            ml_threshold=snapshot.ml.threshold,
        )
