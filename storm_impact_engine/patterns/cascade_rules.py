"""
Label rewrite rules for storm event cleaning.

Each rule is a (trigger, replacement) pair. Rules are applied in list order to
labels the approximate matcher could not place; a trigger is tested against the
label as rewritten by every earlier rule, so order encodes priority
(flood before fire, cold before winter, and so on).
"""

CASCADE_RULES = [
    # Wind
    ("NON-TSTM", "STRONG WIND"),
    ("NON TSTM", "STRONG WIND"),
    ("WIND", "STRONG WIND"),
    ("TSTM", "THUNDERSTORM WIND"),
    ("MICROBURST", "THUNDERSTORM WIND"),

    # Flooding and fire
    ("FLD", "FLOOD"),
    ("FLOOD", "FLOOD"),
    ("FIRE", "WILDFIRE"),

    # Tropical cyclones
    ("HURRICANE", "HURRICANE (TYPHOON)"),
    ("TYPHOON", "HURRICANE (TYPHOON)"),

    # Cold and coastal
    ("COLD", "EXTREME COLD/WIND CHILL"),
    ("STORM SURGE", "STORM SURGE/TIDE"),
    ("SURF", "STORM SURGE/TIDE"),

    # Winter precipitation
    ("LIGHT SNOW", "WINTER WEATHER"),
    ("SNOW", "HEAVY SNOW"),
    ("FOG", "DENSE FOG"),
    ("WINTER", "WINTER WEATHER"),
    ("COASTAL STORM", "MARINE THUNDERSTORM WIND"),
    ("FREEZ", "FROST/FREEZE"),
    ("WINTRY MIX", "WINTER WEATHER"),
    ("GLAZE", "ICE STORM"),
]
