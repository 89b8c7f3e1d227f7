"""Matching constants for live route and battle resolution.

Contains hardcoded aliases, word lists and patterns that can't be solved
through scoring alone. Rules are data: add a row here rather than a branch
in the matcher.
"""

# =============================================================================
# CHANNEL MARKERS
# The game HUD appends the server channel to the map name ("Route 10 Ch 2",
# "Cerulean City Ch.1"). OCR sometimes splits the digits ("Ch 1-2").
# =============================================================================

CHANNEL_MARKER_PATTERN = r"\s+ch\.?\s*\d*(?:\s*[-/]\s*\d+)*(?=\s|$)"

# Characters treated as "dash" when the whole OCR line is nothing but dashes
DASH_CHARACTERS = "-‐‑‒–—―−_"


# =============================================================================
# ALIAS KEY WORD LISTS
# =============================================================================

WEEKDAY_NAMES: tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "tues",
    "thur",
    "thurs",
    "sun",
    "mon",
    "tue",
    "wed",
    "thu",
    "fri",
    "sat",
)

# Structural words that decorate map names but don't identify them.
# "Cerulean City" and "Cerulean" must resolve to the same key.
STRUCTURAL_WORDS: frozenset[str] = frozenset(
    {
        "city",
        "town",
        "cave",
        "road",
        "gate",
        "outside",
        "inside",
        "entrance",
        "exit",
    }
)

# Currency-like tokens the HUD renders next to the map (player money)
CURRENCY_SYMBOLS = "$€£¥"


# =============================================================================
# MANUAL ALIASES
# Known problematic names. Keys and values are compact alias keys
# (lowercase, alphanumeric only, structural words already removed).
# =============================================================================

LIVE_ALIASES: dict[str, str] = {
    "mtcoronet": "mountcoronet",
    "mtcoronet4f": "mountcoronet",
    "mountcoronet4f": "mountcoronet",
    # OCR drops the accented e
    "pokmonleague": "pokemonleague",
    "victoryrd": "victory",
}

# Common mojibake patterns (double-encoded UTF-8) seen in ingested map names
MOJIBAKE_PATTERNS: tuple[tuple[str, str], ...] = (
    ("Ã©", "é"),
    ("Ã¨", "è"),
    ("Ã¼", "ü"),
    ("Ã¶", "ö"),
    ("Ã¤", "ä"),
    ("Ã±", "ñ"),
    ("Ä‚Â©", "é"),
    ("Ă©", "é"),
)

# Gender glyphs unidecode drops; "Nidoran♀" and "Nidoran♂" must fold apart
GENDER_SYMBOLS: tuple[tuple[str, str], ...] = (
    ("♀", "-F"),
    ("♂", "-M"),
)

# First words that abbreviate "mount" ("Mt. Moon", "Mnt Silver")
MOUNT_ABBREVIATIONS: frozenset[str] = frozenset({"m", "mt", "mnt", "mtn", "mo", "mou", "moun", "mount"})


# =============================================================================
# MAP GROUPING
# =============================================================================

# Split halves of the same route are shown as one area
ROUTE_HALF_SUFFIXES: tuple[str, ...] = ("north", "south", "east", "west")

# Regions where every Victory Road floor/section is one area
UNIFIED_VICTORY_ROAD_REGIONS: frozenset[str] = frozenset({"sinnoh"})


# =============================================================================
# ENCOUNTER METHODS, TIMES, RARITIES
# =============================================================================

# Canonical time tags, in display order
TIME_TAGS: tuple[str, ...] = ("Morning", "Day", "Evening", "Night")

TIME_TAG_ALIASES: dict[str, str] = {
    "morning": "Morning",
    "morn": "Morning",
    "day": "Day",
    "daytime": "Day",
    "evening": "Evening",
    "dusk": "Evening",
    "night": "Night",
    "nighttime": "Night",
}

# Rarity tiers, most common first
RARITY_TIERS: tuple[str, ...] = ("Very Common", "Common", "Uncommon", "Rare", "Very Rare")

RARITY_TIER_RANK: dict[str, int] = {tier.lower(): rank for rank, tier in enumerate(RARITY_TIERS)}


# =============================================================================
# BATTLE TEXT MARKERS
# Health-bar labels carry level, HP and party-count decorations that must be
# removed before species names are searched.
# =============================================================================

BATTLE_MARKER_PATTERNS: tuple[str, ...] = (
    # Lv. 12, Lvl 5, Level 30, L50
    r"\b(?:lv|lvl|level|l)\s*[.:]?\s*\d+\b",
    # HP 34/50, HP: 12 / 40
    r"\bhp\s*[.:]?\s*\d+\s*/\s*\d+",
    # Bare HP label
    r"\bhp\b",
    # Party count and leftover fractions (3/6, 34/50)
    r"\b\d+\s*/\s*\d+\b",
    # Pokeball glyphs rendered as text
    r"[●○]",
)

# Minimum normalized similarity for the line-by-line fallback
SPECIES_FALLBACK_SIMILARITY = 0.8
