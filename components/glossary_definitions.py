"""Glossary term definitions for the Gunnison County Property Map."""

GLOSSARY_TERMS = {
    "color_modes": {
        "label": "Color Modes",
        "icon": "🎨",
        "terms": {
            "Total Value": {
                "definition": "Total actual value of the parcel, bucketed into Low (< $200K), Medium ($200K-$400K), High ($400K-$800K) and Very High (≥ $800K). Each breakpoint belongs to the higher bucket.",
                "note": "Uses the property attributes value when available, otherwise the value recorded on the parcel layer.",
                "legend_mode": "SumOfACTUALVALUE",
            },
            "Parcel Total Value": {
                "definition": "Same buckets as Total Value, offered separately for comparing against the parcel layer's own assessment.",
                "legend_mode": "TOTALACTUA",
            },
            "Quality": {
                "definition": "Exterior condition from the property attributes table (EXT CONDITION).",
                "note": "Only parcels with detailed property attributes are colored.",
                "legend_mode": "EXT CONDITION",
            },
            "View Description": {
                "definition": "Assessor's view classification from the property attributes table (ATTRIBUTESUBTYPE).",
                "note": "Only parcels with detailed property attributes are colored.",
                "legend_mode": "ATTRIBUTESUBTYPE",
            },
        }
    },
    "data_sources": {
        "label": "Data Sources",
        "icon": "🗂️",
        "terms": {
            "Property data": {
                "definition": "The parcel's account number matched a row in the property attributes table; quality, view, value, situs, subdivision and year built come from that row."
            },
            "Parcel data": {
                "definition": "No property attributes row matched. Value, location, subdivision and tax year come from the parcel layer; quality and view are Unknown."
            },
            "No data": {
                "definition": "No account number could be read from the parcel, so nothing is joined and the parcel is never colored."
            },
        }
    },
    "overlays": {
        "label": "Overlays",
        "icon": "🗺️",
        "terms": {
            "Subdivisions": {
                "definition": "Subdivision boundaries drawn as gray outlines."
            },
            "Address Points": {
                "definition": "Address point locations, hidden by default. Matching address labels also appear in parcel popups."
            },
        }
    }
}
