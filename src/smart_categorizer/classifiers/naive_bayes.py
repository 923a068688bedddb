"""
Multinomial Naive Bayes over normalized transaction terms.

Features are the tokenizer's unigrams plus adjacent bigrams. Training builds a
closed vocabulary in first-seen order, class log-priors log(n_c / N) and per-class
term log-likelihoods with add-one smoothing:

    log((count(term, class) + 1) / (total_terms(class) + |V|))

Prediction sums the log-likelihoods of in-vocabulary features onto the class prior,
picks the arg-max (ties go to the class seen first during training) and reports its
softmax probability as confidence.

Model file layout (little-endian):

    magic "SCNB" | u16 version | u32 vocabulary size | u32 class count
    vocabulary size x (u32 byte length, utf-8 term)
    class count x (u32 byte length, utf-8 label)
    class count x f64 log-prior
    class count x vocabulary size x f64 log-likelihood (row per class)
"""
import os
import struct
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from smart_categorizer import tokenizer
from smart_categorizer.errors import ModelLoadError, ModelSaveError, TrainingError
from smart_categorizer.logger import get_logger
from smart_categorizer.models import CategorizationResult, CategorizationSource

from .base import ClassificationContext, Classifier

logger = get_logger(__name__)

MODEL_MAGIC = b"SCNB"
MODEL_FORMAT_VERSION = 1
DEFAULT_THRESHOLD = 0.5

_HEADER = struct.Struct("<4sHII")
_LENGTH = struct.Struct("<I")
_FLOAT_BYTES = 8


class TrainingSample(NamedTuple):
    text: str
    label: str


def features_for(terms: Sequence[str]) -> list[str]:
    return tokenizer.extract_ngrams(list(terms))


@dataclass(frozen=True, eq=False)
class NaiveBayesModel:
    vocabulary: tuple[str, ...]
    classes: tuple[str, ...]
    class_log_priors: np.ndarray
    term_log_likelihoods: np.ndarray
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        priors = np.array(self.class_log_priors, dtype=np.float64)
        table = np.array(self.term_log_likelihoods, dtype=np.float64).reshape(
            len(self.classes), len(self.vocabulary)
        )
        priors.setflags(write=False)
        table.setflags(write=False)
        object.__setattr__(self, "class_log_priors", priors)
        object.__setattr__(self, "term_log_likelihoods", table)
        object.__setattr__(self, "_index", {term: i for i, term in enumerate(self.vocabulary)})

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary)

    @property
    def num_classes(self) -> int:
        return len(self.classes)

    def feature_indices(self, terms: Sequence[str]) -> list[int]:
        """Vocabulary indices of the known features; unseen terms are skipped."""
        return [self._index[f] for f in features_for(terms) if f in self._index]

    def log_scores(self, terms: Sequence[str]) -> np.ndarray:
        indices = self.feature_indices(terms)
        if not indices:
            return self.class_log_priors.copy()
        return self.class_log_priors + self.term_log_likelihoods[:, indices].sum(axis=1)

    def predict_proba(self, terms: Sequence[str]) -> np.ndarray:
        scores = self.log_scores(terms)
        # shift by the max before exponentiating to keep exp() in range
        weights = np.exp(scores - scores.max())
        return weights / weights.sum()

    def predict(self, terms: Sequence[str]) -> tuple[str, float]:
        probabilities = self.predict_proba(terms)
        # argmax returns the first maximum, i.e. the earliest-seen class on ties
        best = int(np.argmax(probabilities))
        return self.classes[best], float(probabilities[best])


def train(samples: Iterable[TrainingSample | tuple[str, str]]) -> NaiveBayesModel:
    samples = [TrainingSample(*sample) for sample in samples]
    if not samples:
        raise TrainingError("Cannot train on an empty sample set")

    classes: dict[str, int] = {}
    vocabulary: dict[str, int] = {}
    documents: list[tuple[int, list[int]]] = []

    for sample in samples:
        class_idx = classes.setdefault(sample.label, len(classes))
        indices = [
            vocabulary.setdefault(feature, len(vocabulary))
            for feature in features_for(tokenizer.normalize(sample.text))
        ]
        documents.append((class_idx, indices))

    if len(classes) < 2:
        raise TrainingError(
            f"Need at least 2 distinct categories to train, got {len(classes)}"
        )
    if not vocabulary:
        raise TrainingError("No usable terms in the training samples")

    n_classes = len(classes)
    n_terms = len(vocabulary)
    class_counts = np.zeros(n_classes, dtype=np.float64)
    term_counts = np.zeros((n_classes, n_terms), dtype=np.float64)

    for class_idx, indices in documents:
        class_counts[class_idx] += 1
        np.add.at(term_counts[class_idx], indices, 1.0)

    class_log_priors = np.log(class_counts / len(documents))
    totals = term_counts.sum(axis=1, keepdims=True)
    term_log_likelihoods = np.log((term_counts + 1.0) / (totals + n_terms))

    logger.info(
        "[MODEL] Trained on %s samples: %s classes, %s vocabulary terms",
        len(documents),
        n_classes,
        n_terms,
    )
    return NaiveBayesModel(
        vocabulary=tuple(vocabulary),
        classes=tuple(classes),
        class_log_priors=class_log_priors,
        term_log_likelihoods=term_log_likelihoods,
    )


def _pack_strings(values: Sequence[str]) -> bytes:
    parts = []
    for value in values:
        encoded = value.encode("utf-8")
        parts.append(_LENGTH.pack(len(encoded)))
        parts.append(encoded)
    return b"".join(parts)


def serialize_model(model: NaiveBayesModel) -> bytes:
    return b"".join((
        _HEADER.pack(MODEL_MAGIC, MODEL_FORMAT_VERSION, model.vocabulary_size, model.num_classes),
        _pack_strings(model.vocabulary),
        _pack_strings(model.classes),
        model.class_log_priors.astype("<f8").tobytes(),
        model.term_log_likelihoods.astype("<f8").tobytes(order="C"),
    ))


def save_model(model: NaiveBayesModel, path: str) -> int:
    """Write the model file atomically. Returns the number of bytes written."""
    payload = serialize_model(model)
    tmp_path = f"{path}.tmp"
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(tmp_path, "wb") as f:
            f.write(payload)
        os.replace(tmp_path, path)
    except OSError as e:
        raise ModelSaveError(f"Could not write model to {path}: {e}") from e
    logger.info("[MODEL] Saved model to %s (%s bytes)", path, len(payload))
    return len(payload)


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def take(self, size: int, what: str) -> bytes:
        if size > self.remaining:
            raise ModelLoadError(
                f"Model file truncated while reading {what}: "
                f"need {size} bytes, {self.remaining} left"
            )
        chunk = self.data[self.offset:self.offset + size]
        self.offset += size
        return chunk

    def strings(self, count: int, what: str) -> tuple[str, ...]:
        values = []
        for _ in range(count):
            (length,) = _LENGTH.unpack(self.take(_LENGTH.size, what))
            try:
                values.append(self.take(length, what).decode("utf-8"))
            except UnicodeDecodeError as e:
                raise ModelLoadError(f"Corrupt {what} entry: {e}") from e
        return tuple(values)

    def floats(self, count: int, what: str) -> np.ndarray:
        raw = self.take(count * _FLOAT_BYTES, what)
        return np.frombuffer(raw, dtype="<f8").astype(np.float64)


def deserialize_model(data: bytes) -> NaiveBayesModel:
    reader = _Reader(data)
    magic, version, vocab_size, num_classes = _HEADER.unpack(reader.take(_HEADER.size, "header"))
    if magic != MODEL_MAGIC:
        raise ModelLoadError("Not a categorization model file (bad magic)")
    if version != MODEL_FORMAT_VERSION:
        raise ModelLoadError(
            f"Unsupported model format version {version} (expected {MODEL_FORMAT_VERSION})"
        )
    if num_classes < 2 or vocab_size < 1:
        raise ModelLoadError(
            f"Degenerate model header: {num_classes} classes, {vocab_size} terms"
        )

    expected_tables = (num_classes + num_classes * vocab_size) * _FLOAT_BYTES
    # strings need at least their length prefix each
    if reader.remaining < (vocab_size + num_classes) * _LENGTH.size + expected_tables:
        raise ModelLoadError("Model file shorter than its declared vocabulary/class counts")

    vocabulary = reader.strings(vocab_size, "vocabulary")
    classes = reader.strings(num_classes, "class labels")
    if len(set(vocabulary)) != vocab_size:
        raise ModelLoadError("Vocabulary contains duplicate terms")
    if len(set(classes)) != num_classes:
        raise ModelLoadError("Class labels contain duplicates")

    priors = reader.floats(num_classes, "class priors")
    table = reader.floats(num_classes * vocab_size, "term likelihoods")
    if reader.remaining:
        raise ModelLoadError(
            f"Model file has {reader.remaining} unexpected trailing bytes; "
            "declared counts do not match payload"
        )
    if not (np.all(np.isfinite(priors)) and np.all(np.isfinite(table))):
        raise ModelLoadError("Model contains non-finite probabilities")

    return NaiveBayesModel(
        vocabulary=vocabulary,
        classes=classes,
        class_log_priors=priors,
        term_log_likelihoods=table.reshape(num_classes, vocab_size),
    )


def load_model(path: str) -> NaiveBayesModel:
    """Read and validate a model file; nothing is returned unless all of it checks out."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ModelLoadError(f"Could not read model file {path}: {e}") from e
    model = deserialize_model(data)
    logger.info(
        "[MODEL] Loaded %s (%s classes, %s terms)", path, model.num_classes, model.vocabulary_size
    )
    return model


class NaiveBayesClassifier(Classifier):
    source = CategorizationSource.ML

    def __init__(self, model: NaiveBayesModel | None = None, threshold: float = DEFAULT_THRESHOLD):
        self.model = model
        self.threshold = min(max(threshold, 0.0), 1.0)

    @property
    def has_model(self) -> bool:
        return self.model is not None

    def vocabulary_size(self) -> int:
        return self.model.vocabulary_size if self.model else 0

    def num_classes(self) -> int:
        return self.model.num_classes if self.model else 0

    def classify(self, context: ClassificationContext) -> CategorizationResult | None:
        model = self.model
        if model is None or not context.terms:
            return None
        if not model.feature_indices(context.terms):
            # only the priors would speak; that is not evidence about this transaction
            return None

        category, confidence = model.predict(context.terms)
        if confidence < self.threshold:
            logger.debug(
                "[MODEL] '%s' at %.2f below threshold %.2f", category, confidence, self.threshold
            )
            return None
        return CategorizationResult(category=category, confidence=confidence, source=self.source)
