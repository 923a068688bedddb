import math
import struct

import numpy as np
import pytest

from smart_categorizer.classifiers.base import ClassificationContext
from smart_categorizer.classifiers.naive_bayes import (
    NaiveBayesClassifier,
    NaiveBayesModel,
    deserialize_model,
    load_model,
    save_model,
    serialize_model,
    train,
)
from smart_categorizer.errors import ModelLoadError, ModelSaveError, TrainingError
from smart_categorizer.models import CategorizationSource, TransactionInput
from smart_categorizer.tokenizer import normalize

SAMPLES = [
    ("Albert supermarket potraviny", "groceries"),
    ("Lidl supermarket", "groceries"),
    ("Billa potraviny", "groceries"),
    ("Shell benzin", "transport"),
    ("OMV benzin tankovani", "transport"),
    ("DPP jizdenka", "transport"),
]


@pytest.fixture
def model() -> NaiveBayesModel:
    return train(SAMPLES)


def test_training_builds_vocabulary_in_first_seen_order(model):
    assert model.classes == ("groceries", "transport")
    assert model.vocabulary[:5] == (
        "albert",
        "supermarket",
        "potraviny",
        "albert_supermarket",
        "supermarket_potraviny",
    )
    assert model.vocabulary_size == 19


def test_training_probabilities(model):
    assert np.allclose(model.class_log_priors, np.log([0.5, 0.5]))

    # groceries emits 11 features, "supermarket" twice; |V| = 19
    idx = model.vocabulary.index("supermarket")
    assert model.term_log_likelihoods[0, idx] == pytest.approx(math.log(3 / 30))
    assert model.term_log_likelihoods[1, idx] == pytest.approx(math.log(1 / 30))


def test_predict(model):
    category, confidence = model.predict(normalize("LIDL Praha"))
    assert category == "groceries"
    assert 0.5 < confidence <= 1.0

    category, _ = model.predict(normalize("Shell benzin"))
    assert category == "transport"


def test_predict_ignores_unknown_terms(model):
    assert model.predict(["benzin", "neznamy"]) == model.predict(["benzin"])


def test_predict_tie_goes_to_first_seen_class(model):
    category, confidence = model.predict(["neznamy"])
    assert category == "groceries"
    assert confidence == pytest.approx(0.5)


def test_predict_is_stable_for_extreme_scores():
    model = NaiveBayesModel(
        vocabulary=("a1",),
        classes=("x", "y"),
        class_log_priors=[-1000.0, -1001.0],
        term_log_likelihoods=[[-0.1], [-0.1]],
    )
    category, confidence = model.predict(["a1"])

    assert category == "x"
    assert math.isfinite(confidence)
    assert confidence == pytest.approx(1 / (1 + math.exp(-1)))


def test_training_is_deterministic():
    first, second = train(SAMPLES), train(SAMPLES)

    assert first.vocabulary == second.vocabulary
    assert np.array_equal(first.term_log_likelihoods, second.term_log_likelihoods)
    assert serialize_model(first) == serialize_model(second)


def test_training_rejects_degenerate_input():
    with pytest.raises(TrainingError):
        train([])
    with pytest.raises(TrainingError):
        train([("Albert", "groceries"), ("Lidl", "groceries")])
    with pytest.raises(TrainingError):
        train([("platba", "a"), ("12345", "b")])


def test_save_and_load_preserve_predictions(model, tmp_path):
    path = str(tmp_path / "model.bin")
    written = save_model(model, path)

    loaded = load_model(path)

    assert written == (tmp_path / "model.bin").stat().st_size
    assert loaded.vocabulary == model.vocabulary
    assert loaded.classes == model.classes
    for text in ["Lidl nakup", "OMV tankovani", "Billa", "neco jineho"]:
        expected_category, expected_confidence = model.predict(normalize(text))
        category, confidence = loaded.predict(normalize(text))
        assert category == expected_category
        assert confidence == pytest.approx(expected_confidence)


def test_save_model_reports_write_failure(model, tmp_path):
    with pytest.raises(ModelSaveError):
        save_model(model, str(tmp_path))


def test_load_missing_file(tmp_path):
    with pytest.raises(ModelLoadError):
        load_model(str(tmp_path / "missing.bin"))


def test_load_rejects_bad_magic(model):
    data = b"XXXX" + serialize_model(model)[4:]
    with pytest.raises(ModelLoadError, match="magic"):
        deserialize_model(data)


def test_load_rejects_other_version(model):
    data = bytearray(serialize_model(model))
    struct.pack_into("<H", data, 4, 99)
    with pytest.raises(ModelLoadError, match="version"):
        deserialize_model(bytes(data))


def test_load_rejects_truncated_file(model):
    data = serialize_model(model)
    with pytest.raises(ModelLoadError):
        deserialize_model(data[:-5])
    with pytest.raises(ModelLoadError):
        deserialize_model(data[:6])


def test_load_rejects_trailing_bytes(model):
    with pytest.raises(ModelLoadError):
        deserialize_model(serialize_model(model) + b"\x00" * 8)


def test_load_rejects_inconsistent_counts(model):
    data = bytearray(serialize_model(model))
    struct.pack_into("<I", data, 6, model.vocabulary_size - 1)
    with pytest.raises(ModelLoadError):
        deserialize_model(bytes(data))

    struct.pack_into("<II", data, 6, model.vocabulary_size, 1)
    with pytest.raises(ModelLoadError):
        deserialize_model(bytes(data))


def test_classifier_defers_without_evidence(model):
    classifier = NaiveBayesClassifier(model)

    def ctx(payee):
        return ClassificationContext.from_transaction(TransactionInput(payee=payee))

    assert NaiveBayesClassifier().classify(ctx("Lidl")) is None
    assert classifier.classify(ctx("")) is None
    assert classifier.classify(ctx("UNKNOWN MERCHANT XYZ")) is None

    result = classifier.classify(ctx("Lidl supermarket"))
    assert result.category == "groceries"
    assert result.source == CategorizationSource.ML
    assert result.confidence >= 0.5


def test_classifier_threshold(model):
    context = ClassificationContext.from_transaction(TransactionInput(payee="supermarket benzin"))
    _, confidence = model.predict(context.terms)

    assert NaiveBayesClassifier(model, threshold=min(confidence + 0.01, 1.0)).classify(context) is None
    assert NaiveBayesClassifier(model, threshold=confidence).classify(context) is not None
