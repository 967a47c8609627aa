"""
Pipeline configuration for storm event normalisation.
Contains matching thresholds, ranking defaults and ingest settings.
"""

PIPELINE_CONFIG = {
    # Approximate label matching against the event catalog
    "matching": {
        "max_distance": 1,  # OSA edit distance; accept only if min distance <= this
        "tie_break": "catalog_order",  # first catalog entry wins among equal distances
    },

    # Per-category rankings
    "ranking": {
        "default_top_n": 10,
        "metrics": [
            "fatalities",
            "injuries",
            "property_cost",
            "crop_cost",
            "health_impact",  # fatalities + injuries
            "economic_cost",  # property_cost + crop_cost
        ],
    },

    # Source table layout (NOAA storm database export)
    "ingest": {
        "columns": {
            "timestamp": "BGN_DATE",
            "event_label": "EVTYPE",
            "fatalities": "FATALITIES",
            "injuries": "INJURIES",
            "property_amount": "PROPDMG",
            "property_unit_code": "PROPDMGEXP",
            "crop_amount": "CROPDMG",
            "crop_unit_code": "CROPDMGEXP",
        },
        "timestamp_format": "%m/%d/%Y %H:%M:%S",
        # NOAA recorded all 48 event types from January 1996 onwards
        "complete_records_start_year": 1996,
        "drop_zero_impact": True,
    },

    "processing": {
        "chunk_size": 50000,
    },
}
