import random
from datetime import datetime, timedelta
from typing import List, Optional

from .domain import (
    BiodiversitySite,
    CitizenReport,
    FloodAlert,
    Location,
    RiverState,
    SafetyAlert,
    SensorReading,
    WasteDetection,
    WaterChemistry,
    WaterLevel,
)
from .forecast import build_flood_forecast
from .health_engine import sensor_health
from .settings import DEFAULT_LATITUDE, DEFAULT_LONGITUDE, ISSUE_TYPES

LAT = DEFAULT_LATITUDE
LNG = DEFAULT_LONGITUDE

# (id, name, dlat, dlng, ph, do, bod, cod, tds, turbidity, temp, waste, flood, species, diversity)
_SENSORS = [
    ("sensor-001", "Sabarmati North", 0.01, -0.01, 7.2, 8.5, 2.1, 180, 320, 3.2, 24, 12, 15, 18, 0.75),
    ("sensor-002", "River Center", 0.0, 0.0, 7.5, 9.2, 1.8, 150, 280, 2.5, 23, 8, 12, 22, 0.82),
    ("sensor-003", "Sabarmati South", -0.008, 0.012, 6.9, 6.8, 2.8, 220, 420, 4.5, 26, 25, 22, 12, 0.58),
    ("sensor-004", "East Bank", 0.005, 0.008, 7.8, 7.5, 2.5, 200, 380, 3.8, 25, 18, 18, 15, 0.65),
    ("sensor-005", "West Bank", -0.006, -0.009, 6.7, 5.5, 3.2, 280, 520, 5.2, 28, 35, 28, 8, 0.42),
]

# (id, severity, waste type, location, minutes ago, confidence)
_WASTE = [
    ("waste-001", "high", "Plastic Bottles", "Sabarmati North Bank", 15, 92),
    ("waste-002", "medium", "Paper Waste", "River Center", 45, 85),
    ("waste-003", "low", "Organic Matter", "East Bank", 120, 78),
    ("waste-004", "high", "Plastic Bags", "Sabarmati South", 180, 95),
    ("waste-005", "medium", "Metal Cans", "West Bank", 300, 88),
    ("waste-006", "low", "Glass Bottles", "River Center", 480, 82),
    ("waste-007", "high", "Mixed Waste", "Sabarmati North", 720, 90),
    ("waste-008", "medium", "Styrofoam", "East Bank", 1080, 87),
    ("waste-009", "low", "Cardboard", "West Bank", 1440, 75),
    ("waste-010", "high", "Plastic Containers", "Sabarmati South", 2160, 93),
]

# (id, title, severity, location, risk, minutes ago, water level, rainfall)
_FLOOD_ALERTS = [
    ("alert-001", "High Flood Risk - North Bank", "high", "Sabarmati North Bank", 85, 15, 4.2, 45.5),
    ("alert-002", "Moderate Risk - River Center", "moderate", "River Center", 55, 45, 3.1, 28.3),
    ("alert-003", "High Flood Risk - South Bank", "high", "Sabarmati South Bank", 92, 120, 4.8, 52.1),
    ("alert-004", "Moderate Risk - East Bank", "moderate", "East Bank Area", 48, 180, 2.9, 22.7),
    ("alert-005", "High Flood Risk - Confluence Point", "high", "Confluence Point", 78, 300, 4.5, 38.9),
    ("alert-006", "Moderate Risk - West Bank", "moderate", "West Bank Area", 42, 480, 2.7, 18.5),
]

# (id, title, description, severity, category, location, hours ago)
_SAFETY = [
    ("safety-001", "Unsafe Water Quality Detected",
     "High levels of contaminants detected in river water. Avoid direct contact.",
     "critical", "Water Quality", "Sabarmati North Bank", 0.5),
    ("safety-002", "Damaged Walkway Railing",
     "Railing damage reported on riverside walkway. Risk of falling into water.",
     "high", "Infrastructure", "River Center Promenade", 2),
    ("safety-004", "Pollution Incident Reported",
     "Suspected chemical discharge into river. Investigation underway.",
     "high", "Pollution", "Sabarmati South", 6),
    ("safety-007", "High Bacterial Count",
     "Elevated bacterial levels detected. Swimming not recommended.",
     "high", "Water Quality", "West Bank Swimming Area", 18),
    ("safety-003", "Slippery Surface Warning",
     "Wet and slippery conditions on walkway due to recent rainfall.",
     "moderate", "Public Safety", "East Bank Walkway", 4),
    ("safety-005", "Low Visibility Conditions",
     "Fog and low visibility affecting riverside area.",
     "moderate", "Public Safety", "River Center", 8),
    ("safety-006", "Maintenance Work Scheduled",
     "Scheduled maintenance work on water treatment facility.",
     "low", "Maintenance", "Water Treatment Plant", 12),
]

_DOMINANT_SPECIES = [
    ["Fish", "Turtles", "Birds"],
    ["Fish", "Frogs", "Insects"],
    ["Birds", "Fish", "Plants"],
]


def seed_sensors(now: datetime) -> List[SensorReading]:
    sensors = []
    for (sid, name, dlat, dlng, ph, do, bod, cod, tds, turb, temp,
         waste, flood, species, diversity) in _SENSORS:
        sensor = SensorReading(
            id=sid,
            name=name,
            location=Location(LAT + dlat, LNG + dlng),
            water=WaterChemistry(
                ph=ph, dissolved_oxygen=do, bod=bod, cod=cod,
                tds=tds, turbidity=turb, temperature=temp,
            ),
            waste_level=float(waste),
            flood_risk=float(flood),
            species_count=species,
            diversity_index=diversity,
            last_updated=now,
        )
        sensor.status = sensor_health(sensor).rating
        sensors.append(sensor)
    return sensors


def seed_biodiversity(rng: random.Random, now: datetime) -> List[BiodiversitySite]:
    # (dlat, dlng, species base, species spread, diversity base, diversity spread)
    layout = [
        (0.01, -0.01, 15, 10, 0.6, 0.3),
        (0.0, 0.0, 20, 15, 0.7, 0.2),
        (-0.01, 0.01, 12, 8, 0.5, 0.3),
    ]
    sites = []
    for i, (dlat, dlng, sp, sp_spread, dv, dv_spread) in enumerate(layout):
        sites.append(
            BiodiversitySite(
                id=f"bio-{i + 1:03d}",
                location=Location(LAT + dlat, LNG + dlng),
                species_count=min(30, int(sp + rng.random() * sp_spread)),
                diversity_index=min(1.0, dv + rng.random() * dv_spread),
                dominant_species=list(_DOMINANT_SPECIES[i]),
                last_updated=now,
            )
        )
    return sites


def seed_citizen_reports(rng: random.Random, now: datetime, count: int = 10) -> List[CitizenReport]:
    statuses = ["pending", "reviewed", "resolved"]
    reports = [
        CitizenReport(
            id=f"report-{i + 1:03d}",
            user_id=f"user-{rng.randrange(100)}",
            user_email=f"user{i + 1}@example.com",
            issue_type=rng.choice(ISSUE_TYPES),
            description=f"Report {i + 1}: Issue reported by citizen",
            location=Location(
                LAT + (rng.random() - 0.5) * 0.02,
                LNG + (rng.random() - 0.5) * 0.02,
            ),
            timestamp=now - timedelta(hours=rng.random() * 7 * 24),
            status=rng.choice(statuses),
        )
        for i in range(count)
    ]
    reports.sort(key=lambda r: r.timestamp, reverse=True)
    return reports


def seed_state(rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> RiverState:
    """Initial snapshot the monitoring session starts from."""
    rng = rng or random.Random()
    now = now or datetime.utcnow()

    waste = [
        WasteDetection(
            id=wid, severity=sev, waste_type=wtype, location=loc,
            timestamp=now - timedelta(minutes=mins), confidence=float(conf),
        )
        for wid, sev, wtype, loc, mins, conf in _WASTE
    ]
    flood_alerts = [
        FloodAlert(
            id=aid, title=title,
            description="Water level rising. Monitor conditions closely.",
            severity=sev, location=loc, risk_level=float(risk),
            water_level=level, rainfall=rain,
            timestamp=now - timedelta(minutes=mins),
        )
        for aid, title, sev, loc, risk, mins, level, rain in _FLOOD_ALERTS
    ]
    safety = [
        SafetyAlert(
            id=aid, title=title, description=desc, severity=sev,
            category=cat, location=loc, timestamp=now - timedelta(hours=hours),
        )
        for aid, title, desc, sev, cat, loc, hours in _SAFETY
    ]

    return RiverState(
        sensors=seed_sensors(now),
        flood=build_flood_forecast(rng, now),
        water_level=WaterLevel(current_level=2.8, capacity=5.0, last_updated=now),
        biodiversity=seed_biodiversity(rng, now),
        waste_detections=waste,
        flood_alerts=flood_alerts,
        safety_alerts=safety,
        citizen_reports=seed_citizen_reports(rng, now),
        last_update=now,
    )
