"""
Synthetic labelled corpus used to bootstrap the Naive Bayes model.

Every sample comes from the fixed templates below, so two calls to generate()
return the same list in the same order.
"""
from collections import Counter
from dataclasses import dataclass

from smart_categorizer.classifiers.naive_bayes import TrainingSample


@dataclass(frozen=True)
class CategoryTemplate:
    category: str
    merchants: tuple[str, ...]
    generic: tuple[str, ...] = ()
    # card purchases also show up with amounts and dates glued on by the bank
    card_variations: bool = True


CARD_VARIATIONS = (
    "{merchant}",
    "{merchant} CZK -523.00",
    "Nakup {merchant} 15.12.2025",
)

TEMPLATES: tuple[CategoryTemplate, ...] = (
    CategoryTemplate(
        category="groceries",
        merchants=(
            "ALBERT CZ 12345 PRAHA", "Albert Hypermarket Praha 5", "ALBERT SUPERMARKET S.R.O.",
            "BILLA spol. s r.o.", "BILLA PRAHA", "Billa supermarket",
            "LIDL Ceska republika", "Lidl Praha", "LIDL CESKA REPUBLIKA V.O.S.",
            "KAUFLAND CESKA REPUBLIKA", "Kaufland hypermarket", "KAUFLAND Brno",
            "TESCO STORES CR", "Tesco Praha", "TESCO EXPRESS", "Tesco Extra",
            "PENNY MARKET S.R.O.", "Penny Market Praha", "GLOBUS CR K.S.", "Globus hypermarket",
            "MAKRO Cash & Carry", "CBA potraviny", "COOP Jednota", "FLOP Diskont",
            "ROHLIK.CZ", "Rohlik Group", "KOSIK.CZ", "Kosik s.r.o.",
        ),
        generic=(
            "potraviny", "Nákup potravin", "Supermarket", "Hypermarket nakup",
            "Prodejna potravin", "Smíšené zboží", "Večerka", "Samoobsluha",
            "Zelenina ovoce", "Mlékárna", "Pekárna", "Řeznictví",
        ),
    ),
    CategoryTemplate(
        category="dining",
        merchants=(
            "UBER EATS", "Uber Eats Praha", "WOLT", "Wolt Praha", "WOLT ENTERPRISES OY",
            "BOLT FOOD", "Bolt food delivery", "DAMEJIDLO.CZ", "Dame Jidlo",
            "MCDONALDS", "McDonald's CZ", "BURGER KING", "KFC Czech", "SUBWAY Praha",
            "PIZZA HUT", "DOMINOS PIZZA", "STARBUCKS COFFEE", "Costa Coffee",
            "POTREFENA HUSA", "AMBIENTE RESTAURANTS", "PILSNER URQUELL RESTAURANT",
            "KOLKOVNA GROUP", "RESTAURACE KOZLOVNA",
        ),
        generic=(
            "Restaurace", "Hospoda", "Pivnice", "Kavárna", "CAFE", "Bistro", "Bufet",
            "Jídelna", "Pizzerie", "Sushi bar", "Čínská restaurace", "Italská restaurace",
        ),
    ),
    CategoryTemplate(
        category="transport",
        merchants=(
            "DPP", "Dopravni podnik Praha", "DPP Litacka kupon", "PID Litacka",
            "CESKE DRAHY", "České dráhy a.s.", "CD.CZ jizdenka", "REGIOJET", "RegioJet jizdenka",
            "LEO EXPRESS", "FLIXBUS", "UBER TRIP", "Uber Praha jizda", "BOLT.EU RIDE",
            "Liftago taxi", "SHELL CZ", "Shell čerpací stanice", "OMV Ceska republika",
            "MOL CESKA REPUBLIKA", "BENZINA ORLEN", "EuroOil", "Parkovani Praha",
            "DALNICNI ZNAMKA", "edalnice.cz",
        ),
        generic=("Jízdenka", "Jizdne", "Tankování", "Pohonné hmoty", "Parkovné", "Taxi"),
    ),
    CategoryTemplate(
        category="utilities",
        merchants=(
            "CEZ PRODEJ", "ČEZ Prodej a.s.", "PRE distribuce", "Prazska energetika",
            "E.ON Energie", "INNOGY ENERGIE", "Pražská plynárenská", "PVK Prazske vodovody",
            "Veolia voda", "O2 Czech Republic", "T-MOBILE CZECH REPUBLIC", "Vodafone Czech Republic",
            "UPC Ceska republika", "Nordic Telecom", "Starnet internet",
        ),
        generic=(
            "Elektřina záloha", "Plyn záloha", "Vodné stočné", "Internet paušál",
            "Mobilní tarif", "Vyúčtování energie",
        ),
        card_variations=False,
    ),
    CategoryTemplate(
        category="entertainment",
        merchants=(
            "NETFLIX.COM", "Netflix International", "SPOTIFY", "Spotify AB", "HBO MAX",
            "Disney Plus", "YOUTUBE PREMIUM", "APPLE.COM/BILL", "STEAM PURCHASE",
            "PlayStation Network", "XBOX", "CINEMA CITY", "Cinestar", "Kino Svetozor",
            "TICKETPORTAL", "GoOut tickets", "Ticketmaster", "Národní divadlo",
        ),
        generic=("Kino vstupenky", "Koncert vstupenka", "Divadlo", "Předplatné streaming"),
    ),
    CategoryTemplate(
        category="shopping",
        merchants=(
            "ALZA.CZ", "Alza.cz a.s.", "MALL.CZ", "CZC.CZ", "DATART", "ELECTRO WORLD",
            "IKEA Praha Zlicin", "IKEA Ceska republika", "HORNBACH", "OBI", "BAUHAUS",
            "H&M", "ZARA", "RESERVED", "DECATHLON", "SPORTISIMO", "AMAZON EU",
            "AMAZON.DE MARKETPLACE", "ALIEXPRESS", "ZALANDO", "NOTINO", "DM DROGERIE",
            "ROSSMANN", "TETA drogerie",
        ),
        generic=("Elektronika", "Oblečení", "Obuv", "Nábytek", "Drogerie", "Hračky"),
    ),
    CategoryTemplate(
        category="health",
        merchants=(
            "DR.MAX LEKARNA", "Dr. Max lékárna", "BENU LEKARNA", "Benu lékárna Praha",
            "PILULKA.CZ", "LEKARNA U ANDELA", "Nemocnice Motol", "VFN Praha",
            "Fakultní nemocnice", "Poliklinika Budejovicka", "ZUBNI ORDINACE",
            "MUDr. Novak", "Fitness Factory", "Multisport", "Form Factory",
        ),
        generic=("Lékárna", "Léky", "Ordinace", "Zubař", "Poplatek u lékaře", "Optika"),
    ),
    CategoryTemplate(
        category="travel",
        merchants=(
            "BOOKING.COM", "Booking.com BV", "AIRBNB", "Airbnb payments", "RYANAIR",
            "WIZZ AIR", "SMARTWINGS", "CZECH AIRLINES", "LUFTHANSA", "EASYJET",
            "HOTEL DUO PRAHA", "HOTEL INTERNATIONAL", "EXPEDIA", "TRIVAGO", "INVIA.CZ",
            "CEDOK", "FISCHER cestovni kancelar", "LETISTE PRAHA",
        ),
        generic=("Hotel", "Ubytování", "Penzion", "Letenka", "Dovolená", "Cestovní pojištění"),
    ),
    CategoryTemplate(
        category="income",
        merchants=(),
        generic=(
            "MZDA", "Výplata mzdy", "Mzdový převod", "PRIPSANI MZDY", "Pravidelná mzda",
            "VYPLATA", "Stravenkový paušál", "BENEFITY", "Příspěvek zaměstnavatele",
            "ČSSZ důchod", "Důchod", "Sociální dávky", "Rodičovský příspěvek",
            "Příspěvek na bydlení", "MPSV", "Úřad práce podpora", "Došlá platba",
            "Vklad hotovosti", "Připsaný úrok", "Úrok z vkladu", "Platba za fakturu",
            "Přijatá faktura", "VRATKA", "Vrácení peněz", "REFUNDACE", "Dobropis",
        ),
        card_variations=False,
    ),
    CategoryTemplate(
        category="transfers",
        merchants=(),
        generic=(
            "Revolut top-up", "REVOLUT LTD", "Revolut**1234*", "Wise transfer",
            "TRANSFERWISE", "PayPal převod", "PAYPAL *TRANSFER", "Převod mezi účty",
            "Převod na spořicí účet", "Vlastní převod", "Převod vlastní účet",
            "Interní převod", "Spoření převod", "Okamžitá platba vlastní",
            "Dobití Revolut", "Převod na Revolut",
        ),
        card_variations=False,
    ),
    CategoryTemplate(
        category="investments",
        merchants=(),
        generic=(
            "XTB", "XTB S.A.", "Trading 212", "TRADING212", "Interactive Brokers",
            "DEGIRO", "Portu investice", "PORTU a.s.", "Fondee", "Anycoin",
            "COINMATE", "Coinbase", "Binance", "Conseq investice", "Amundi fondy",
            "Stavební spoření", "Penzijní spoření", "Doplňkové penzijní spoření",
            "Nákup podílových listů", "Investiční fond",
        ),
        card_variations=False,
    ),
    CategoryTemplate(
        category="housing",
        merchants=(),
        generic=(
            "Nájem", "NAJEMNE", "Nájemné byt", "Platba nájmu", "Záloha služby byt",
            "SVJ příspěvek", "Fond oprav SVJ", "Společenství vlastníků", "Hypotéka splátka",
            "Splátka hypotéky", "HYPOTECNI BANKA", "Pojištění domácnosti",
            "Pojištění nemovitosti", "Správa nemovitosti", "Bytové družstvo",
        ),
        card_variations=False,
    ),
    CategoryTemplate(
        category="taxes",
        merchants=(),
        generic=(
            "Finanční úřad", "FINANCNI URAD PRO HL M PRAHU", "Daň z příjmů",
            "Daň z nemovitosti", "DPH platba", "Silniční daň", "Sociální pojištění OSVČ",
            "ČSSZ pojistné", "Zdravotní pojištění OSVČ", "VZP pojistné", "Celní úřad",
            "Správní poplatek", "Místní poplatek odpad", "Poplatek za psa",
        ),
        card_variations=False,
    ),
)


def _samples_for(template: CategoryTemplate) -> list[TrainingSample]:
    variations = CARD_VARIATIONS if template.card_variations else CARD_VARIATIONS[:1]
    samples = [
        TrainingSample(variation.format(merchant=merchant), template.category)
        for merchant in template.merchants
        for variation in variations
    ]
    samples.extend(TrainingSample(text, template.category) for text in template.generic)
    return samples


def generate() -> list[TrainingSample]:
    samples: list[TrainingSample] = []
    for template in TEMPLATES:
        samples.extend(_samples_for(template))
    return samples


def category_counts(samples: list[TrainingSample]) -> list[tuple[str, int]]:
    """Samples per category, largest first."""
    return Counter(sample.label for sample in samples).most_common()
