from dataclasses import dataclass
from time import perf_counter

from smart_categorizer.classifiers.naive_bayes import NaiveBayesModel, save_model, train
from smart_categorizer.logger import get_logger
from smart_categorizer.services import training_data

logger = get_logger(__name__)


@dataclass(frozen=True)
class TrainingReport:
    model_path: str
    sample_count: int
    samples_per_category: list[tuple[str, int]]
    vocabulary_size: int
    num_classes: int
    file_size: int
    duration: float

    @property
    def file_size_kb(self) -> float:
        return self.file_size / 1024.0


def build_model() -> tuple[NaiveBayesModel, list[tuple[str, int]], int]:
    samples = training_data.generate()
    counts = training_data.category_counts(samples)
    logger.info("[TRAIN] Generated %s samples across %s categories", len(samples), len(counts))
    for category, count in counts:
        logger.debug("[TRAIN]   %s: %s samples", category, count)
    return train(samples), counts, len(samples)


def train_and_save(model_path: str) -> TrainingReport:
    """
    Offline pipeline: synthetic corpus -> Naive Bayes -> model file.
    Raises TrainingError or ModelSaveError; nothing is written unless training succeeds.
    """
    start = perf_counter()
    model, counts, sample_count = build_model()
    file_size = save_model(model, model_path)
    report = TrainingReport(
        model_path=model_path,
        sample_count=sample_count,
        samples_per_category=counts,
        vocabulary_size=model.vocabulary_size,
        num_classes=model.num_classes,
        file_size=file_size,
        duration=perf_counter() - start,
    )
    logger.info(
        "[TRAIN] Complete in %.2fs: %s terms, %s classes, %.1f KB",
        report.duration,
        report.vocabulary_size,
        report.num_classes,
        report.file_size_kb,
    )
    return report
