"""Static entity lexicon: canonical names, aliases and relationship tables.

Everything here is immutable and built once at import. Terms are written in
display form (``AL-QAEDA``, ``F-35``); matching normalizes them the same way
article text is normalized, so punctuation inside a term is insignificant.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from intelscore.errors import LexiconLookupFailure


@dataclass(frozen=True)
class LexiconEntry:
    canonical: str
    aliases: tuple[str, ...] = ()

    @property
    def terms(self) -> tuple[str, ...]:
        return (self.canonical, *self.aliases)


def _table(rows: dict[str, tuple[str, ...]]) -> tuple[LexiconEntry, ...]:
    return tuple(LexiconEntry(name, aliases) for name, aliases in rows.items())


COUNTRIES = _table({
    "UNITED STATES": ("USA", "US", "AMERICA", "UNITED STATES OF AMERICA", "WASHINGTON"),
    "CHINA": ("PRC", "PEOPLE'S REPUBLIC OF CHINA", "PEOPLES REPUBLIC OF CHINA", "MAINLAND CHINA", "BEIJING"),
    "RUSSIA": ("RUSSIAN FEDERATION", "MOSCOW", "KREMLIN"),
    "IRAN": ("ISLAMIC REPUBLIC OF IRAN", "PERSIA", "TEHRAN"),
    "NORTH KOREA": (
        "DPRK", "DEMOCRATIC PEOPLE'S REPUBLIC OF KOREA", "DEMOCRATIC PEOPLES REPUBLIC OF KOREA", "PYONGYANG",
    ),
    "SOUTH KOREA": ("ROK", "REPUBLIC OF KOREA", "SEOUL"),
    "UKRAINE": ("KIEV", "KYIV"),
    "TAIWAN": ("ROC", "REPUBLIC OF CHINA", "TAIPEI"),
    "ISRAEL": ("JEWISH STATE", "TEL AVIV", "JERUSALEM"),
    "PALESTINE": ("PALESTINIAN TERRITORIES", "GAZA", "WEST BANK"),
    "UNITED KINGDOM": ("UK", "BRITAIN", "GREAT BRITAIN", "ENGLAND"),
    "SAUDI ARABIA": ("KINGDOM OF SAUDI ARABIA", "RIYADH"),
    "TURKEY": ("TURKISH REPUBLIC", "TURKIYE", "ANKARA"),
    "PAKISTAN": ("ISLAMIC REPUBLIC OF PAKISTAN", "ISLAMABAD"),
    "INDIA": ("REPUBLIC OF INDIA", "NEW DELHI"),
    "JAPAN": ("NIPPON", "TOKYO"),
    "GERMANY": ("FEDERAL REPUBLIC OF GERMANY", "BERLIN"),
    "FRANCE": ("FRENCH REPUBLIC", "PARIS"),
    "SYRIA": ("SYRIAN ARAB REPUBLIC", "DAMASCUS"),
    "IRAQ": ("REPUBLIC OF IRAQ", "BAGHDAD"),
    "AFGHANISTAN": ("KABUL",),
    "PHILIPPINES": ("MANILA",),
    "VIETNAM": ("VIET NAM", "HANOI"),
    "VENEZUELA": ("CARACAS",),
    "MYANMAR": ("BURMA", "NAYPYIDAW"),
})

ORGANIZATIONS = _table({
    # Intelligence agencies
    "CIA": ("CENTRAL INTELLIGENCE AGENCY",),
    "FBI": ("FEDERAL BUREAU OF INVESTIGATION",),
    "NSA": ("NATIONAL SECURITY AGENCY",),
    "FSB": ("FEDERAL SECURITY SERVICE",),
    "SVR": ("FOREIGN INTELLIGENCE SERVICE",),
    "MSS": ("MINISTRY OF STATE SECURITY",),
    "MOSSAD": ("INSTITUTE FOR INTELLIGENCE AND SPECIAL OPERATIONS",),
    "MI6": ("SECRET INTELLIGENCE SERVICE", "SIS"),
    "MI5": ("BRITISH SECURITY SERVICE",),
    "BND": ("FEDERAL INTELLIGENCE SERVICE",),
    "DGSE": ("DIRECTORATE-GENERAL FOR EXTERNAL SECURITY",),
    "ISI": ("INTER-SERVICES INTELLIGENCE",),
    # Military
    "NATO": ("NORTH ATLANTIC TREATY ORGANIZATION",),
    "PENTAGON": ("DEPARTMENT OF DEFENSE", "DOD"),
    "PLA": ("PEOPLE'S LIBERATION ARMY", "PEOPLES LIBERATION ARMY"),
    "IRGC": ("IRANIAN REVOLUTIONARY GUARD CORPS", "REVOLUTIONARY GUARD", "REVOLUTIONARY GUARDS"),
    "IDF": ("ISRAEL DEFENSE FORCES",),
    "BUNDESWEHR": ("GERMAN ARMED FORCES",),
    # International
    "UN": ("UNITED NATIONS",),
    "IAEA": ("INTERNATIONAL ATOMIC ENERGY AGENCY",),
    "WHO": ("WORLD HEALTH ORGANIZATION",),
    "EU": ("EUROPEAN UNION",),
    "ASEAN": ("ASSOCIATION OF SOUTHEAST ASIAN NATIONS",),
    "BRICS": (),
    # Terrorist and armed groups
    "ISIS": ("ISLAMIC STATE", "ISIL", "DAESH"),
    "AL-QAEDA": ("AL QAIDA", "AQ"),
    "TALIBAN": ("ISLAMIC EMIRATE OF AFGHANISTAN",),
    "HEZBOLLAH": ("HIZBULLAH", "PARTY OF GOD"),
    "HAMAS": ("ISLAMIC RESISTANCE MOVEMENT",),
    "HOUTHIS": ("HOUTHI", "ANSAR ALLAH"),
    "BOKO HARAM": (),
    "PKK": ("KURDISTAN WORKERS PARTY",),
    "WAGNER GROUP": ("WAGNER PMC", "WAGNER MERCENARIES"),
    # Cyber groups
    "LAZARUS GROUP": ("HIDDEN COBRA",),
    "APT1": ("COMMENT CREW", "PLA UNIT 61398"),
    "APT28": ("FANCY BEAR", "SOFACY"),
    "APT29": ("COZY BEAR", "THE DUKES"),
    "SANDWORM": ("VOODOO BEAR", "IRON VIKING"),
})

TECHNOLOGIES = _table({
    # Nuclear
    "NUCLEAR REACTOR": ("REACTOR", "NUCLEAR PLANT", "NUCLEAR POWER PLANT"),
    "URANIUM ENRICHMENT": ("ENRICHMENT", "CENTRIFUGE", "CENTRIFUGES", "ISOTOPE SEPARATION", "ENRICHED URANIUM"),
    "PLUTONIUM": ("WEAPONS-GRADE PLUTONIUM",),
    "NUCLEAR WEAPON": ("NUCLEAR WEAPONS", "ATOMIC WEAPON", "ATOMIC WEAPONS", "NUKE", "NUKES"),
    # Cyber and computing
    "ARTIFICIAL INTELLIGENCE": ("AI", "MACHINE LEARNING", "ML", "NEURAL NETWORK"),
    "QUANTUM COMPUTING": ("QUANTUM COMPUTER", "QUANTUM PROCESSOR"),
    "BLOCKCHAIN": ("DISTRIBUTED LEDGER", "CRYPTOCURRENCY"),
    "DEEPFAKE": ("DEEPFAKES", "SYNTHETIC MEDIA", "AI-GENERATED"),
    "ZERO-DAY": ("0-DAY", "ZERO DAY EXPLOIT"),
    "MALWARE": ("TROJAN", "ROOTKIT", "SPYWARE"),
    "RANSOMWARE": ("CRYPTO-MALWARE", "RANSOM MALWARE"),
    "BOTNET": ("ZOMBIE NETWORK", "BOT NETWORK"),
    # Military technology
    "HYPERSONIC MISSILE": ("HYPERSONIC WEAPON", "HYPERSONIC GLIDE VEHICLE"),
    "STEALTH TECHNOLOGY": ("STEALTH", "LOW OBSERVABLE"),
    "SATELLITE": ("SATELLITES", "ORBITAL VEHICLE", "SPACECRAFT"),
    "DRONE": ("DRONES", "UAV", "UNMANNED AERIAL VEHICLE", "UAS"),
    "RADAR": ("SURVEILLANCE RADAR",),
    "SONAR": ("ACOUSTIC DETECTION", "UNDERWATER DETECTION"),
    "GPS": ("GLOBAL POSITIONING SYSTEM", "NAVIGATION SATELLITE"),
    "SURVEILLANCE": ("RECONNAISSANCE", "INTELLIGENCE GATHERING"),
})

WEAPONS = _table({
    # Strategic
    "ICBM": ("INTERCONTINENTAL BALLISTIC MISSILE", "LONG-RANGE MISSILE"),
    "SLBM": ("SUBMARINE-LAUNCHED BALLISTIC MISSILE",),
    "HYPERSONIC MISSILE": ("HYPERSONIC WEAPON", "MACH 5 MISSILE"),
    "CRUISE MISSILE": ("LAND-ATTACK MISSILE", "TOMAHAWK"),
    "BALLISTIC MISSILE": ("SURFACE-TO-SURFACE MISSILE",),
    # Nuclear
    "NUCLEAR WARHEAD": ("ATOMIC WARHEAD", "NUCLEAR BOMB"),
    "HYDROGEN BOMB": ("H-BOMB", "THERMONUCLEAR WEAPON"),
    "TACTICAL NUCLEAR WEAPON": ("BATTLEFIELD NUCLEAR WEAPON",),
    # Aircraft
    "F-35": ("F-35 LIGHTNING", "JOINT STRIKE FIGHTER"),
    "F-22": ("F-22 RAPTOR",),
    "SU-57": ("SUKHOI SU-57", "PAK FA"),
    "J-20": ("CHENGDU J-20", "MIGHTY DRAGON"),
    "B-21": ("B-21 RAIDER",),
    "B-52": ("B-52 STRATOFORTRESS",),
    # Naval
    "AIRCRAFT CARRIER": ("FLATTOP",),
    "SUBMARINE": ("UNDERWATER VESSEL",),
    "DESTROYER": ("GUIDED MISSILE DESTROYER",),
    "FRIGATE": (),
    # Conventional
    "JAVELIN": ("JAVELIN MISSILE",),
    "PATRIOT": ("PATRIOT MISSILE",),
    "HIMARS": ("HIGH MOBILITY ARTILLERY ROCKET SYSTEM",),
    "APACHE": ("AH-64 APACHE",),
    "PREDATOR": ("MQ-1 PREDATOR", "PREDATOR DRONE"),
    "REAPER": ("MQ-9 REAPER", "REAPER DRONE"),
})

WEAPON_SYSTEMS = _table({
    # Air defense
    "S-300": ("S-300 SYSTEM", "SA-10"),
    "S-400": ("S-400 TRIUMF", "SA-21"),
    "S-500": ("S-500 PROMETHEUS", "SA-X-23"),
    "IRON DOME": ("IRON DOME SYSTEM",),
    "THAAD": ("TERMINAL HIGH ALTITUDE AREA DEFENSE",),
    "AEGIS": ("AEGIS COMBAT SYSTEM",),
    # Missile systems
    "ISKANDER": ("ISKANDER MISSILE SYSTEM",),
    "DF-21": ("DONG FENG 21", "CARRIER KILLER"),
    "DF-26": ("DONG FENG 26", "GUAM KILLER"),
    "KINZHAL": ("KINZHAL MISSILE", "DAGGER MISSILE"),
    "ZIRCON": ("ZIRCON HYPERSONIC MISSILE",),
    "SARMAT": ("RS-28 SARMAT", "SATAN 2"),
})

LOCATIONS = _table({
    # Military sites
    "PENTAGON": ("DEPARTMENT OF DEFENSE HQ",),
    "CHEYENNE MOUNTAIN": ("NORAD HEADQUARTERS",),
    "AREA 51": ("GROOM LAKE",),
    "GUANTANAMO BAY": ("GITMO",),
    "DIEGO GARCIA": ("BRITISH INDIAN OCEAN TERRITORY",),
    # Nuclear facilities
    "NATANZ": ("NATANZ ENRICHMENT FACILITY",),
    "FORDOW": ("FORDO", "FORDOW FUEL ENRICHMENT PLANT"),
    "YONGBYON": ("YONGBYON NUCLEAR COMPLEX",),
    "DIMONA": ("NEGEV NUCLEAR RESEARCH CENTER",),
    # Strategic waterways and regions
    "STRAIT OF HORMUZ": ("HORMUZ STRAIT", "HORMUZ"),
    "SOUTH CHINA SEA": ("SCS",),
    "TAIWAN STRAIT": ("FORMOSA STRAIT",),
    "SUEZ CANAL": ("SUEZ WATERWAY",),
    "GIBRALTAR": ("STRAIT OF GIBRALTAR",),
    "BOSPHORUS": ("BOSPHORUS STRAIT", "BOSPORUS"),
    "BAB EL-MANDEB": ("BAB AL-MANDAB",),
})

LEXICON = MappingProxyType({
    "countries": COUNTRIES,
    "organizations": ORGANIZATIONS,
    "technologies": TECHNOLOGIES,
    "weapons": WEAPONS,
    "weapon_systems": WEAPON_SYSTEMS,
    "locations": LOCATIONS,
})

# Short terms that are also ordinary English words ("us", "who") only count
# when they appear upper-case in the original text.
CASE_SENSITIVE_TERMS = frozenset({"US", "UN", "WHO", "AI", "ML", "AQ", "SIS", "ROC", "SCS", "UAS"})


def entries(entity_class: str) -> tuple[LexiconEntry, ...]:
    """Lexicon rows for one entity class."""
    try:
        return LEXICON[entity_class]
    except KeyError:
        raise LexiconLookupFailure(entity_class) from None


# Relationship tables, keyed on canonical names. Blocs (NATO, EU) resolve
# against organizations.
ADVERSARIAL_PAIRS = (
    ("UNITED STATES", "CHINA"),
    ("UNITED STATES", "RUSSIA"),
    ("UNITED STATES", "IRAN"),
    ("UNITED STATES", "NORTH KOREA"),
    ("CHINA", "TAIWAN"),
    ("RUSSIA", "NATO"),
    ("RUSSIA", "UKRAINE"),
    ("IRAN", "ISRAEL"),
    ("INDIA", "PAKISTAN"),
)

ALLIED_PAIRS = (
    ("UNITED STATES", "NATO"),
    ("UNITED STATES", "JAPAN"),
    ("UNITED STATES", "SOUTH KOREA"),
    ("UNITED STATES", "ISRAEL"),
    ("EU", "NATO"),
    ("CHINA", "RUSSIA"),
    ("CHINA", "NORTH KOREA"),
)

MULTILATERAL_MIN_COUNTRIES = 3
MULTILATERAL_MAX_MEMBERS = 5

HIGH_VALUE_ENTITIES = frozenset({
    "UNITED STATES", "CHINA", "RUSSIA",
    "NUCLEAR WEAPON", "NUCLEAR WARHEAD", "ICBM", "HYPERSONIC MISSILE",
    "CIA", "FSB", "MSS",
})

# Either side may be a canonical entity or a word in the text
CRITICAL_COMBINATIONS = (
    ("NUCLEAR", "IRAN"),
    ("NUCLEAR", "NORTH KOREA"),
    ("CYBER", "ATTACK"),
    ("MISSILE", "TEST"),
    ("MILITARY", "DEPLOYMENT"),
    ("TERRORIST", "ATTACK"),
)

ESCALATION_INDICATORS = ("DEPLOYMENT", "MOBILIZATION", "ALERT", "READINESS", "EXERCISE", "BUILDUP")

LOCATION_TYPES = MappingProxyType({
    "MILITARY_BASE": frozenset({"PENTAGON", "CHEYENNE MOUNTAIN", "AREA 51", "GUANTANAMO BAY", "DIEGO GARCIA"}),
    "NUCLEAR_FACILITY": frozenset({"NATANZ", "FORDOW", "YONGBYON", "DIMONA"}),
    "STRATEGIC_WATERWAY": frozenset({
        "STRAIT OF HORMUZ", "TAIWAN STRAIT", "GIBRALTAR", "BOSPHORUS", "SUEZ CANAL", "BAB EL-MANDEB",
    }),
})

LOCATION_VALUE = MappingProxyType({
    "CRITICAL": frozenset({"STRAIT OF HORMUZ", "TAIWAN STRAIT", "SUEZ CANAL", "PENTAGON"}),
    "HIGH": frozenset({"SOUTH CHINA SEA", "NATANZ", "FORDOW", "YONGBYON", "GIBRALTAR", "BAB EL-MANDEB"}),
})


def location_type(name: str) -> str:
    for kind, names in LOCATION_TYPES.items():
        if name in names:
            return kind
    return "STRATEGIC_LOCATION"


def location_value(name: str) -> str:
    for value, names in LOCATION_VALUE.items():
        if name in names:
            return value
    return "MEDIUM"
