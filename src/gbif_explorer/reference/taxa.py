"""GBIF backbone taxon keys used as filter presets."""

TAXON_CLASS_KEYS: dict[str, int] = {
    "birds": 212,
    "mammals": 359,
    "reptiles": 358,
    "amphibians": 131,
    "plants": 6,
    "insects": 216,
    "fungi": 5,
    "mollusks": 52,
}

# IUCN Red List category codes accepted by the iucnRedListCategory filter
IUCN_CATEGORIES: tuple[str, ...] = ("EX", "EW", "CR", "EN", "VU", "NT", "LC", "DD", "NA")

# GBIF continent enum values
CONTINENTS: tuple[str, ...] = (
    "AFRICA",
    "ANTARCTICA",
    "ASIA",
    "EUROPE",
    "NORTH_AMERICA",
    "OCEANIA",
    "SOUTH_AMERICA",
)
