from smart_categorizer.models import CategorizationRule, RuleType

MERCHANT_PRIORITY = 50
GENERIC_PRIORITY = 40

C = RuleType.CONTAINS
R = RuleType.REGEX
P = RuleType.PREFIX

# (id, name, type, pattern, category, priority)
_DEFAULTS: tuple[tuple[str, str, RuleType, str, str, int], ...] = (
    # groceries
    ("albert", "Albert", C, "albert", "groceries", MERCHANT_PRIORITY),
    ("billa", "Billa", C, "billa", "groceries", MERCHANT_PRIORITY),
    ("lidl", "Lidl", C, "lidl", "groceries", MERCHANT_PRIORITY),
    ("kaufland", "Kaufland", C, "kaufland", "groceries", MERCHANT_PRIORITY),
    ("tesco", "Tesco", C, "tesco", "groceries", MERCHANT_PRIORITY),
    ("penny", "Penny Market", C, "penny market", "groceries", MERCHANT_PRIORITY),
    ("globus", "Globus", C, "globus", "groceries", MERCHANT_PRIORITY),
    ("makro", "Makro", C, "makro", "groceries", MERCHANT_PRIORITY),
    ("rohlik", "Rohlík.cz", C, "rohlik", "groceries", MERCHANT_PRIORITY),
    ("kosik", "Košík.cz", C, "kosik cz", "groceries", MERCHANT_PRIORITY),
    ("coop", "COOP", R, r"\bcoop\b", "groceries", GENERIC_PRIORITY),
    # dining
    ("uber-eats", "Uber Eats", R, r"\buber ?eats\b", "dining", MERCHANT_PRIORITY + 5),
    ("wolt", "Wolt", C, "wolt", "dining", MERCHANT_PRIORITY),
    ("bolt-food", "Bolt Food", C, "bolt food", "dining", MERCHANT_PRIORITY + 5),
    ("damejidlo", "Dáme jídlo", C, "damejidlo", "dining", MERCHANT_PRIORITY),
    ("mcdonalds", "McDonald's", C, "mcdonald", "dining", MERCHANT_PRIORITY),
    ("kfc", "KFC", R, r"\bkfc\b", "dining", MERCHANT_PRIORITY),
    ("burger-king", "Burger King", C, "burger king", "dining", MERCHANT_PRIORITY),
    ("starbucks", "Starbucks", C, "starbucks", "dining", MERCHANT_PRIORITY),
    ("restaurace", "Restaurace", C, "restaurace", "dining", GENERIC_PRIORITY),
    # transport
    ("dpp", "DPP", R, r"\bdpp\b|dopravni podnik", "transport", MERCHANT_PRIORITY),
    ("ceske-drahy", "České dráhy", R, r"ceske drahy|\bcd cz\b", "transport", MERCHANT_PRIORITY),
    ("regiojet", "RegioJet", C, "regiojet", "transport", MERCHANT_PRIORITY),
    ("uber-trip", "Uber", R, r"\buber\b", "transport", GENERIC_PRIORITY),
    ("bolt", "Bolt", R, r"\bbolt\b", "transport", GENERIC_PRIORITY),
    ("shell", "Shell", R, r"\bshell\b", "transport", MERCHANT_PRIORITY),
    ("omv", "OMV", R, r"\bomv\b", "transport", MERCHANT_PRIORITY),
    ("benzina", "Benzina", C, "benzina", "transport", MERCHANT_PRIORITY),
    # utilities
    ("cez", "ČEZ", R, r"\bcez\b", "utilities", MERCHANT_PRIORITY),
    ("pre", "Pražská energetika", C, "prazska energetika", "utilities", MERCHANT_PRIORITY),
    ("pvk", "Pražské vodovody", R, r"\bpvk\b|prazske vodovody", "utilities", MERCHANT_PRIORITY),
    ("o2", "O2", R, r"\bo2 czech\b", "utilities", MERCHANT_PRIORITY),
    ("t-mobile", "T-Mobile", C, "t-mobile", "utilities", MERCHANT_PRIORITY),
    ("vodafone", "Vodafone", C, "vodafone", "utilities", MERCHANT_PRIORITY),
    # entertainment
    ("netflix", "Netflix", C, "netflix", "entertainment", MERCHANT_PRIORITY),
    ("spotify", "Spotify", C, "spotify", "entertainment", MERCHANT_PRIORITY),
    ("hbo", "HBO Max", R, r"\bhbo\b", "entertainment", MERCHANT_PRIORITY),
    ("steam", "Steam", R, r"\bsteam\b", "entertainment", MERCHANT_PRIORITY),
    ("cinema-city", "Cinema City", C, "cinema city", "entertainment", MERCHANT_PRIORITY),
    # shopping
    ("alza", "Alza", C, "alza", "shopping", MERCHANT_PRIORITY),
    ("ikea", "IKEA", C, "ikea", "shopping", MERCHANT_PRIORITY),
    ("amazon", "Amazon", C, "amazon", "shopping", MERCHANT_PRIORITY),
    ("decathlon", "Decathlon", C, "decathlon", "shopping", MERCHANT_PRIORITY),
    ("dm", "dm drogerie", R, r"\bdm drogerie\b", "shopping", MERCHANT_PRIORITY),
    # health
    ("dr-max", "Dr.Max", R, r"\bdr max\b", "health", MERCHANT_PRIORITY),
    ("benu", "BENU", C, "benu", "health", MERCHANT_PRIORITY),
    ("lekarna", "Lékárna", C, "lekarna", "health", GENERIC_PRIORITY),
    # travel
    ("booking", "Booking.com", C, "booking com", "travel", MERCHANT_PRIORITY),
    ("airbnb", "Airbnb", C, "airbnb", "travel", MERCHANT_PRIORITY),
    ("ryanair", "Ryanair", C, "ryanair", "travel", MERCHANT_PRIORITY),
    ("wizz", "Wizz Air", C, "wizz air", "travel", MERCHANT_PRIORITY),
    # income
    ("mzda", "Mzda", R, r"\bmzd[ay]\b|\bvyplata\b", "income", MERCHANT_PRIORITY),
    ("duchod", "Důchod", C, "duchod", "income", MERCHANT_PRIORITY),
    # investments
    ("xtb", "XTB", R, r"\bxtb\b", "investments", MERCHANT_PRIORITY),
    ("trading212", "Trading 212", R, r"trading ?212", "investments", MERCHANT_PRIORITY),
    ("degiro", "DEGIRO", C, "degiro", "investments", MERCHANT_PRIORITY),
    # housing
    ("najem", "Nájem", R, r"\bnajem(ne)?\b", "housing", MERCHANT_PRIORITY),
    ("svj", "SVJ", R, r"\bsvj\b", "housing", MERCHANT_PRIORITY),
    ("hypoteka", "Hypotéka", C, "hypote", "housing", MERCHANT_PRIORITY),
    # taxes
    ("financni-urad", "Finanční úřad", P, "financni urad", "taxes", MERCHANT_PRIORITY + 10),
    ("celni-urad", "Celní úřad", C, "celni urad", "taxes", MERCHANT_PRIORITY),
)


def get_default_rules() -> list[CategorizationRule]:
    return [
        CategorizationRule(
            id=f"default-{rule_id}",
            name=name,
            rule_type=rule_type,
            pattern=pattern,
            category=category,
            priority=priority,
        )
        for rule_id, name, rule_type, pattern, category, priority in _DEFAULTS
    ]
