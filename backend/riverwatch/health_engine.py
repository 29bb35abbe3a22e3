import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .domain import RiverState, SensorReading
from .settings import (
    BIODIVERSITY_NORM,
    FLOOD_NORM,
    HEALTH_BANDS,
    HEALTH_WEIGHTS,
    NEUTRAL_SCORE,
    WASTE_NORM,
    WATER_POINTS,
    WATER_QUALITY_PARAMS,
)


@dataclass
class HealthScore:
    overall: int
    category: str  # Excellent | Good | Fair | Poor | Critical
    rating: str  # lowercase category
    breakdown: Dict[str, int]  # water_quality, waste, flood, biodiversity


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _round(x: float) -> int:
    # half-up, not banker's rounding
    return int(math.floor(x + 0.5))


def _value(data: Optional[Mapping[str, float]], key: str) -> Optional[float]:
    if not data:
        return None
    v = data.get(key)
    return None if v is None else float(v)


def _band_points(value: float, lo: float, hi: float, points: float) -> float:
    """Full points at the band midpoint, linear decay to zero at either edge."""
    if value < lo or value > hi:
        return 0.0
    optimal = (lo + hi) / 2
    max_distance = (hi - lo) / 2
    return points * (1 - abs(value - optimal) / max_distance)


def _lower_is_better(value: float, hi: float, points: float) -> float:
    if value > hi:
        return 0.0
    return points * (1 - value / hi)


def water_quality_score(data: Optional[Mapping[str, float]]) -> int:
    """
    0-100 from the chemistry parameters that are present.
    Missing parameters are left out of the normalization instead of scoring
    zero; with nothing present the score is neutral.
    """
    p = WATER_QUALITY_PARAMS
    earned = 0.0
    possible = 0.0

    ph = _value(data, "ph")
    if ph is not None:
        earned += _band_points(ph, p["ph"]["min"], p["ph"]["max"], WATER_POINTS["ph"])
        possible += WATER_POINTS["ph"]

    do = _value(data, "dissolved_oxygen")
    if do is not None:
        pts = WATER_POINTS["dissolved_oxygen"]
        if do >= p["dissolved_oxygen"]["min"]:
            earned += min(pts, do / p["dissolved_oxygen"]["max"] * pts)
        else:
            earned += max(0.0, do / p["dissolved_oxygen"]["min"] * pts / 2)
        possible += pts

    for key in ("bod", "cod", "turbidity", "tds"):
        v = _value(data, key)
        if v is not None:
            earned += _lower_is_better(v, p[key]["max"], WATER_POINTS[key])
            possible += WATER_POINTS[key]

    temp = _value(data, "temperature")
    if temp is not None:
        earned += _band_points(
            temp, p["temperature"]["min"], p["temperature"]["max"], WATER_POINTS["temperature"]
        )
        possible += WATER_POINTS["temperature"]

    if possible == 0:
        return NEUTRAL_SCORE
    return _round(_clamp(earned / possible * 100.0, 0.0, 100.0))


def waste_score(data: Optional[Mapping[str, float]]) -> int:
    score = 100.0

    level = _value(data, "detection_level")
    if level is not None:
        score -= level / 100.0 * 50.0

    floating = _value(data, "floating_waste")
    if floating is not None:
        normalized = min(100.0, floating / WASTE_NORM["floating_waste"] * 100.0)
        score -= normalized / 100.0 * 30.0

    plastic = _value(data, "plastic_count")
    if plastic is not None:
        normalized = min(100.0, plastic / WASTE_NORM["plastic_count"] * 100.0)
        score -= normalized / 100.0 * 20.0

    return max(0, _round(score))


def flood_score(data: Optional[Mapping[str, float]]) -> int:
    score = 100.0

    risk = _value(data, "risk_level")
    if risk is not None:
        score -= risk / 100.0 * 60.0

    level = _value(data, "water_level")
    if level is not None:
        deviation = abs(level - FLOOD_NORM["nominal_water_level_m"])
        score -= min(25.0, deviation / FLOOD_NORM["water_level_span_m"] * 25.0)

    rainfall = _value(data, "rainfall")
    if rainfall is not None:
        normalized = min(100.0, rainfall / FLOOD_NORM["rainfall_mm"] * 100.0)
        score -= normalized / 100.0 * 15.0

    return max(0, _round(score))


def biodiversity_score(data: Optional[Mapping[str, float]]) -> int:
    score = 0.0
    present = 0

    species = _value(data, "species_count")
    if species is not None:
        normalized = min(100.0, species / BIODIVERSITY_NORM["species_count"] * 100.0)
        score += normalized / 100.0 * 40.0
        present += 1

    diversity = _value(data, "diversity_index")
    if diversity is not None:
        score += diversity * 40.0
        present += 1

    aquatic = _value(data, "aquatic_life")
    if aquatic is not None:
        score += aquatic / 100.0 * 20.0
        present += 1

    if present == 0:
        return NEUTRAL_SCORE
    return _round(_clamp(score, 0.0, 100.0))


def category_for_score(score: float) -> str:
    for band in HEALTH_BANDS:
        if score >= band["min"]:
            return band["label"]
    return HEALTH_BANDS[-1]["label"]


def rating_for_score(score: float) -> str:
    for band in HEALTH_BANDS:
        if score >= band["min"]:
            return band["rating"]
    return HEALTH_BANDS[-1]["rating"]


def calculate_health(
    water: Optional[Mapping[str, float]],
    waste: Optional[Mapping[str, float]],
    flood: Optional[Mapping[str, float]],
    biodiversity: Optional[Mapping[str, float]],
) -> HealthScore:
    """
    Weighted river health score:
    - water quality 40%, waste 25%, flood 20%, biodiversity 15%
    - each domain normalized to 0-100 on its own first
    """
    breakdown = {
        "water_quality": water_quality_score(water),
        "waste": waste_score(waste),
        "flood": flood_score(flood),
        "biodiversity": biodiversity_score(biodiversity),
    }
    weighted = sum(breakdown[k] * w for k, w in HEALTH_WEIGHTS.items())
    overall = int(_clamp(_round(weighted), 0, 100))

    return HealthScore(
        overall=overall,
        category=category_for_score(overall),
        rating=rating_for_score(overall),
        breakdown=breakdown,
    )


def sensor_health(sensor: SensorReading) -> HealthScore:
    w = sensor.water
    return calculate_health(
        {
            "ph": w.ph,
            "dissolved_oxygen": w.dissolved_oxygen,
            "bod": w.bod,
            "cod": w.cod,
            "turbidity": w.turbidity,
            "temperature": w.temperature,
            "tds": w.tds,
        },
        {"detection_level": sensor.waste_level},
        {"risk_level": sensor.flood_risk},
        {"species_count": sensor.species_count, "diversity_index": sensor.diversity_index},
    )


def _mean(values) -> Optional[float]:
    values = [float(v) for v in values]
    if not values:
        return None
    return sum(values) / len(values)


def river_health(state: RiverState) -> HealthScore:
    """
    Whole-river score from one snapshot:
    - chemistry and waste level averaged over sensors
    - floating waste / plastic counted from the detection feed
    - flood from the global forecast and gauge
    - biodiversity averaged over survey sites (falls back to sensors)
    """
    sensors = state.sensors
    water = {}
    for key in WATER_QUALITY_PARAMS:
        m = _mean(getattr(s.water, key) for s in sensors)
        if m is not None:
            water[key] = m

    waste = {"floating_waste": len(state.waste_detections)}
    level = _mean(s.waste_level for s in sensors)
    if level is not None:
        waste["detection_level"] = level
    waste["plastic_count"] = sum(
        1 for d in state.waste_detections if "plastic" in d.waste_type.lower()
    )

    flood = {
        "risk_level": state.flood.current_risk,
        "water_level": state.water_level.current_level,
    }
    if state.flood.points:
        flood["rainfall"] = state.flood.points[0].rainfall

    sites = state.biodiversity or sensors
    bio = {}
    species = _mean(s.species_count for s in sites)
    if species is not None:
        bio["species_count"] = species
        bio["diversity_index"] = _mean(s.diversity_index for s in sites)

    return calculate_health(water, waste, flood, bio)
