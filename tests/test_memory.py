import json
import os
import pickle
import threading

import pytest

from smart_categorizer.classifiers.base import ClassificationContext
from smart_categorizer.classifiers.memory import ExactMatchStore, JsonPayeeRepository
from smart_categorizer.models import CategorizationSource, TransactionInput
from smart_categorizer.tokenizer import payee_signature


@pytest.fixture
def payees_file(tmp_path):
    return str(tmp_path / "payees.json")


def classify(store, **fields):
    return store.classify(ClassificationContext.from_transaction(TransactionInput(**fields)))


def test_memory_learn_and_exact_match():
    store = ExactMatchStore()

    assert store.record("Uber Eats", "dining")
    assert store.lookup(payee_signature("UBER EATS s.r.o.")) == ("dining", 0.95)

    result = classify(store, payee="Platba kartou Uber *Eats")
    assert result.category == "dining"
    assert result.confidence == 0.95
    assert result.source == CategorizationSource.EXACT_MATCH
    assert result.matched_payee == "Platba kartou Uber *Eats"


def test_memory_last_write_wins():
    store = ExactMatchStore()
    store.record("Shell CZ", "transport")
    store.record("SHELL CZ", "groceries")

    assert store.lookup("shell cz") == ("groceries", 0.95)
    assert store.entries()["shell cz"].hit_count == 2
    assert len(store) == 1


def test_memory_ignores_vague_payees():
    store = ExactMatchStore()

    assert not store.record("ab", "other")
    assert not store.record("Platba kartou", "other")
    assert len(store) == 0


def test_memory_no_match():
    store = ExactMatchStore()
    store.record("Albert", "groceries")

    assert store.lookup("lidl") is None
    assert classify(store, payee="Lidl") is None


def test_memory_lookup_falls_back_to_iban_then_description():
    store = ExactMatchStore()
    store.record("CZ6508000000192000145399", "housing")
    store.record("Najemne byt Vinohrady", "housing")

    by_iban = classify(store, payee="Jan Novak", counterparty_iban="CZ6508000000192000145399")
    assert by_iban.category == "housing"
    assert by_iban.matched_payee == "CZ6508000000192000145399"

    by_description = classify(store, description="Najemne byt Vinohrady")
    assert by_description.matched_payee == "Najemne byt Vinohrady"


def test_memory_classify_does_not_write():
    store = ExactMatchStore()
    store.record("Albert", "groceries")
    before = store.entries()

    classify(store, payee="Albert")
    classify(store, payee="Unknown shop")

    assert store.entries() == before


def test_memory_forget():
    store = ExactMatchStore()
    store.record("Netflix", "entertainment")

    assert store.forget("NETFLIX")
    assert not store.forget("NETFLIX")
    assert store.lookup("netflix") is None


def test_memory_import_export():
    store = ExactMatchStore()
    imported = store.import_entries({"Albert Praha": "groceries", "x": "other", "Wolt": "dining"})

    assert imported == 2
    assert store.export() == {"albert praha": "groceries", "wolt": "dining"}


def test_memory_persistence(payees_file):
    store = ExactMatchStore(repository=JsonPayeeRepository(payees_file))
    store.record("Rohlik.cz", "groceries")

    assert os.path.exists(payees_file)
    with open(payees_file, encoding="utf-8") as f:
        assert json.load(f)["rohlikcz"]["category"] == "groceries"

    reloaded = ExactMatchStore(repository=JsonPayeeRepository(payees_file))
    assert reloaded.lookup("rohlikcz") == ("groceries", 0.95)


def test_memory_corrupt_file_starts_empty(payees_file):
    with open(payees_file, "w", encoding="utf-8") as f:
        f.write("{not json")

    store = ExactMatchStore(repository=JsonPayeeRepository(payees_file))
    assert len(store) == 0


def test_memory_concurrent_records():
    store = ExactMatchStore()
    payees = [f"merchant number{i:03d}" for i in range(50)]

    threads = [threading.Thread(target=store.record, args=(p, "shopping")) for p in payees]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store) == 50


def test_memory_snapshot_is_detached_and_picklable(payees_file):
    store = ExactMatchStore(repository=JsonPayeeRepository(payees_file))
    store.record("Albert", "groceries")

    copy = pickle.loads(pickle.dumps(store.snapshot()))
    store.record("Billa", "groceries")

    assert copy.repository is None
    assert copy.export() == {"albert": "groceries"}
    assert copy.record("Lidl", "groceries")
    assert "lidl" not in store.export()
