"""
Text normalization for Czech bank transaction text.

normalize: lowercases, folds diacritics, strips currency symbols, amounts, dates and
numeric transaction codes, removes punctuation (internal hyphens survive), then
drops short terms and payment boilerplate stop words.
Examples:
  "Platba kartou ALBERT HYPERMARKET Praha 5" -> ["albert", "hypermarket", "praha"]
  "TESCO STORES 1234" -> ["tesco", "stores"]
  "Příchozí platba VS:123456 Coca-Cola s.r.o." -> ["coca-cola"]
"""
import re
import unicodedata
from dataclasses import dataclass

STOP_WORDS = frozenset({
    # payment terms
    "platba", "kartou", "prevod", "prevodu", "transakce", "operace",
    # currency
    "czk", "eur", "usd", "kc", "korun",
    # payment symbols
    "vs", "ss", "ks",
    # messages
    "zprava", "prijemce", "prichozi", "odchozi",
    # prepositions
    "na", "pro", "od", "do", "ve", "se", "ke", "za", "pri",
    # account terms
    "ucet", "uctu", "bankovni", "cislo",
    # fillers
    "je", "jsou", "byl", "byla", "bylo", "bude",
    # payment types
    "inkaso", "trvaly", "prikaz",
})

# Letters NFKD does not decompose into base + combining mark.
_FOLD_TABLE = str.maketrans({
    "ł": "l",
    "đ": "d",
    "ø": "o",
    "ß": "ss",
    "æ": "ae",
    "œ": "oe",
    "þ": "th",
    "ı": "i",
})

# Bank-added prefixes, longest first so "platba kartou" wins over "platba".
PAYMENT_PREFIXES = (
    "bezhotovostni platba",
    "prichozi platba",
    "odchozi platba",
    "platba kartou",
    "trvaly prikaz",
    "platba",
    "prevod",
    "inkaso",
)

COMPANY_SUFFIXES = (
    "sp z o o", "sp zoo", "s r o", "sro", "spol", "a s", "as", "k s", "ks",
    "v o s", "vos", "o p s", "ops", "z s", "zs", "se", "inc", "ltd", "gmbh",
)

MIN_TERM_LENGTH = 2

_DECIMAL_RE = re.compile(r"\d+(?:[.,:/]\d+)+")
_CODE_RE = re.compile(r"\b\d{4,}\b")
_PUNCT_RE = re.compile(r"[^\w\s-]|_")
_LOOSE_HYPHEN_RE = re.compile(r"(?<![^\W_])-|-(?![^\W_])")
_NON_ALNUM_RE = re.compile(r"[^\w\s]|_")
_WS_RE = re.compile(r"\s+")

_VS_RE = re.compile(r"\bvs[:\s]*(\d+)", re.IGNORECASE)
_SS_RE = re.compile(r"\bss[:\s]*(\d+)", re.IGNORECASE)
_KS_RE = re.compile(r"\bks[:\s]*(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class PaymentSymbols:
    variable_symbol: str | None = None
    specific_symbol: str | None = None
    constant_symbol: str | None = None

    def has_any(self) -> bool:
        return any((self.variable_symbol, self.specific_symbol, self.constant_symbol))


def fold_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.translate(_FOLD_TABLE))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _strip_currency_symbols(text: str) -> str:
    return "".join(" " if unicodedata.category(ch) == "Sc" else ch for ch in text)


def normalize(text: str | None) -> list[str]:
    """Split raw transaction text into normalized terms. Never raises."""
    if not text or not text.strip():
        return []

    s = fold_diacritics(text.lower()).lower()
    s = _strip_currency_symbols(s)
    s = _DECIMAL_RE.sub(" ", s)
    s = _CODE_RE.sub(" ", s)
    s = _PUNCT_RE.sub(" ", s)
    s = _LOOSE_HYPHEN_RE.sub(" ", s)
    s = _WS_RE.sub(" ", s).strip()

    return [
        term for term in s.split(" ")
        if len(term) >= MIN_TERM_LENGTH and term not in STOP_WORDS
    ]


def normalize_text(text: str | None) -> str:
    return " ".join(normalize(text))


def simple_normalize(text: str | None) -> str:
    """Lowercase, fold and drop punctuation, keeping every word (no stop words)."""
    if not text:
        return ""
    s = fold_diacritics(text.lower()).lower()
    s = _strip_currency_symbols(s)
    s = _NON_ALNUM_RE.sub("", s)
    return _WS_RE.sub(" ", s).strip()


def _strip_prefixes(signature: str) -> str:
    stripped = True
    while stripped:
        stripped = False
        for prefix in PAYMENT_PREFIXES:
            if signature == prefix:
                return ""
            if signature.startswith(prefix + " "):
                signature = signature[len(prefix) + 1:]
                stripped = True
                break
    return signature


def _strip_suffix(signature: str) -> str:
    for suffix in COMPANY_SUFFIXES:
        if signature.endswith(" " + suffix):
            return signature[: -len(suffix) - 1].rstrip()
    return signature


def payee_signature(payee: str | None) -> str:
    """
    Deterministic exact-match key for a counterparty.

    "ALBERT HYPERMARKET S.R.O." -> "albert hypermarket"
    "Platba kartou Uber *Eats" -> "uber eats"
    """
    signature = simple_normalize(payee)
    signature = _CODE_RE.sub(" ", signature)
    signature = _WS_RE.sub(" ", signature).strip()
    signature = _strip_prefixes(signature)
    return _strip_suffix(signature).strip()


def extract_symbols(text: str | None) -> PaymentSymbols:
    if not text:
        return PaymentSymbols()

    def _first(pattern: re.Pattern[str]) -> str | None:
        match = pattern.search(text)
        return match.group(1) if match else None

    return PaymentSymbols(
        variable_symbol=_first(_VS_RE),
        specific_symbol=_first(_SS_RE),
        constant_symbol=_first(_KS_RE),
    )


def extract_ngrams(terms: list[str]) -> list[str]:
    """Unigrams in order, followed by adjacent-pair bigrams joined with '_'."""
    bigrams = [f"{left}_{right}" for left, right in zip(terms, terms[1:])]
    return list(terms) + bigrams
