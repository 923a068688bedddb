import os
from unittest.mock import patch

import pytest

from smart_categorizer import train as train_cli
from smart_categorizer.classifiers.naive_bayes import load_model, train
from smart_categorizer.errors import TrainingError
from smart_categorizer.services import training_data
from smart_categorizer.services.training import train_and_save
from smart_categorizer.tokenizer import normalize

CATEGORIES = {
    "groceries", "dining", "transport", "utilities", "entertainment", "shopping", "health",
    "travel", "income", "transfers", "investments", "housing", "taxes",
}


def test_generate_is_deterministic():
    assert training_data.generate() == training_data.generate()


def test_generate_covers_all_categories():
    samples = training_data.generate()
    counts = dict(training_data.category_counts(samples))

    assert set(counts) == CATEGORIES
    assert len(samples) >= 500
    assert all(count > 10 for count in counts.values())


def test_generate_includes_card_variations():
    texts = {sample.text for sample in training_data.generate()}

    assert "TESCO EXPRESS" in texts
    assert "TESCO EXPRESS CZK -523.00" in texts
    assert "Nakup TESCO EXPRESS 15.12.2025" in texts


def test_category_counts_largest_first():
    counts = training_data.category_counts(training_data.generate())
    assert [c for _, c in counts] == sorted((c for _, c in counts), reverse=True)


def test_model_trained_on_corpus_predicts_merchants():
    model = train(training_data.generate())

    assert model.num_classes == len(CATEGORIES)
    assert model.predict(normalize("LIDL diskont"))[0] == "groceries"
    assert model.predict(normalize("Netflix predplatne"))[0] == "entertainment"
    assert model.predict(normalize("Ryanair letenka"))[0] == "travel"


def test_train_and_save(tmp_path):
    path = str(tmp_path / "models" / "categorization_model.bin")

    report = train_and_save(path)

    assert os.path.getsize(path) == report.file_size
    assert report.num_classes == len(CATEGORIES)
    assert report.sample_count == sum(count for _, count in report.samples_per_category)
    assert load_model(path).vocabulary_size == report.vocabulary_size


def test_cli_trains_model(tmp_path, capsys):
    path = tmp_path / "model.bin"

    exit_code = train_cli.main(["--output", str(path)])

    assert exit_code == 0
    assert path.exists()
    out = capsys.readouterr().out
    assert "Vocabulary size:" in out
    assert "groceries" in out


def test_cli_quiet(tmp_path, capsys):
    assert train_cli.main(["--output", str(tmp_path / "model.bin"), "--quiet"]) == 0
    assert capsys.readouterr().out == ""


def test_cli_reports_write_failure(tmp_path, capsys):
    # the output path is an existing directory
    assert train_cli.main(["--output", str(tmp_path)]) == 1
    assert "error: " in capsys.readouterr().err


def test_cli_reports_training_failure(tmp_path, capsys):
    with patch.object(train_cli, "train_and_save", side_effect=TrainingError("no samples")):
        exit_code = train_cli.main(["--output", str(tmp_path / "model.bin")])

    assert exit_code == 1
    assert "error: no samples" in capsys.readouterr().err
    assert not (tmp_path / "model.bin").exists()


def test_cli_uses_model_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "env_model.bin"
    monkeypatch.setenv("MODEL_PATH", str(path))

    assert train_cli.main(["--quiet"]) == 0
    assert path.exists()


def test_cli_rejects_unknown_arguments():
    with pytest.raises(SystemExit):
        train_cli.main(["--epochs", "3"])
