"""
River Watch: Thresholds, Bounds & Weights
=========================================
Static domain constants. Environment-driven settings live in config.py.
"""

# ══════════════════════════════════════════════════════════════════════════════
# WATER QUALITY REFERENCE BANDS (scoring)
# ══════════════════════════════════════════════════════════════════════════════
WATER_QUALITY_PARAMS = {
    "ph":               {"min": 6.5, "max": 8.5,   "unit": "pH"},
    "dissolved_oxygen": {"min": 5.0, "max": 20.0,  "unit": "mg/L"},
    "bod":              {"min": 0.0, "max": 3.0,   "unit": "mg/L"},
    "cod":              {"min": 0.0, "max": 250.0, "unit": "mg/L"},
    "turbidity":        {"min": 0.0, "max": 5.0,   "unit": "NTU"},
    "temperature":      {"min": 15.0, "max": 35.0, "unit": "°C"},
    "tds":              {"min": 0.0, "max": 500.0, "unit": "mg/L"},
}

# Max partial points per water parameter (sum = 100)
WATER_POINTS = {
    "ph":               20,
    "dissolved_oxygen": 20,
    "bod":              15,
    "cod":              15,
    "turbidity":        10,
    "temperature":      10,
    "tds":              10,
}

# ══════════════════════════════════════════════════════════════════════════════
# HEALTH SCORE WEIGHTS & BANDS
# ══════════════════════════════════════════════════════════════════════════════
HEALTH_WEIGHTS = {
    "water_quality": 0.40,
    "waste":         0.25,
    "flood":         0.20,
    "biodiversity":  0.15,
}

# Inclusive lower bounds, checked top-down
HEALTH_BANDS = [
    {"min": 80, "label": "Excellent", "rating": "excellent"},
    {"min": 60, "label": "Good",      "rating": "good"},
    {"min": 40, "label": "Fair",      "rating": "fair"},
    {"min": 20, "label": "Poor",      "rating": "poor"},
    {"min": 0,  "label": "Critical",  "rating": "critical"},
]

NEUTRAL_SCORE = 50

WASTE_NORM = {
    "floating_waste": 100,   # units at which the floating penalty is maxed
    "plastic_count":  50,    # items at which the plastic penalty is maxed
}

FLOOD_NORM = {
    "nominal_water_level_m": 2.5,
    "water_level_span_m":    2.0,   # deviation at which the level penalty is maxed
    "rainfall_mm":           50,
}

BIODIVERSITY_NORM = {
    "species_count": 20,     # 20+ species = full marks
}

# ══════════════════════════════════════════════════════════════════════════════
# ALERT THRESHOLDS
# ══════════════════════════════════════════════════════════════════════════════
ALERT_THRESHOLDS = {
    "ph_min":            6.5,    # alert when pH < 6.5
    "ph_critical":       6.0,    # critical when pH < 6.0
    "waste_max":         50,     # alert when waste level > 50
    "waste_high":        65,
    "waste_critical":    80,
    "flood_risk_high":   70,     # alert when flood risk >= 70
    "flood_high":        75,
    "flood_critical":    85,
    "safety_severities": ("critical", "high"),
}

# ══════════════════════════════════════════════════════════════════════════════
# SIMULATION BOUNDS (closed intervals)
# ══════════════════════════════════════════════════════════════════════════════
DRIFT_TICKS = 20   # ticks needed to traverse a full interval at max step

FIELD_BOUNDS = {
    # sensor water chemistry
    "ph":               (6.0, 8.5),
    "dissolved_oxygen": (3.0, 15.0),
    "bod":              (0.5, 5.0),
    "cod":              (50.0, 300.0),
    "tds":              (100.0, 600.0),
    "turbidity":        (1.0, 10.0),
    "temperature":      (15.0, 35.0),
    # sensor composite levels
    "waste_level":      (0.0, 100.0),
    "flood_risk":       (0.0, 100.0),
    # biodiversity
    "species_count":    (5, 30),
    "diversity_index":  (0.3, 1.0),
    # event records
    "confidence":       (70.0, 100.0),
    "risk_level":       (0.0, 100.0),
    # global flood forecast
    "current_risk":     (0.0, 100.0),
}

# ══════════════════════════════════════════════════════════════════════════════
# CAPPED EVENT QUEUES
# ══════════════════════════════════════════════════════════════════════════════
QUEUE_CAPS = {
    "waste_detections": 20,
    "safety_alerts":    15,
    "flood_alerts":     10,
    "citizen_reports":  20,
}

EVENT_PROBABILITIES = {
    "waste_detections": 0.10,
    "safety_alerts":    0.05,
    "flood_alerts":     0.08,
    "citizen_reports":  0.03,
    "report_status":    0.05,   # pending report gets reviewed/resolved
}

# ══════════════════════════════════════════════════════════════════════════════
# FLOOD FORECAST
# ══════════════════════════════════════════════════════════════════════════════
FORECAST_POINTS = 12
FORECAST_STEP_HOURS = 4

FLOOD_STATUS_BANDS = [
    {"min": 70, "label": "high"},
    {"min": 40, "label": "moderate"},
    {"min": 0,  "label": "low"},
]

WATER_LEVEL_BANDS = [
    {"min": 80, "label": "critical"},
    {"min": 60, "label": "high"},
    {"min": 20, "label": "normal"},
    {"min": 0,  "label": "low"},
]

# ══════════════════════════════════════════════════════════════════════════════
# MAP / RANDOM CONTENT
# ══════════════════════════════════════════════════════════════════════════════
DEFAULT_LATITUDE = 23.0225     # Sabarmati Riverfront
DEFAULT_LONGITUDE = 72.5714

LOCATIONS = [
    "Sabarmati North Bank",
    "River Center",
    "East Bank",
    "West Bank",
    "Sabarmati South",
]

WASTE_TYPES = [
    "Plastic Bottles",
    "Paper Waste",
    "Metal Cans",
    "Glass Bottles",
    "Plastic Bags",
    "Mixed Waste",
]

SAFETY_CATEGORIES = [
    "Water Quality",
    "Infrastructure",
    "Public Safety",
    "Pollution",
    "Maintenance",
]

ISSUE_TYPES = ["waste", "pollution", "safety", "vandalism", "other"]
