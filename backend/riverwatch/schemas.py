from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Dict, List, Optional, Literal

Rating = Literal["excellent", "good", "fair", "poor", "critical"]
AlertClass = Literal["ph", "waste", "flood", "safety"]


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class LocationOut(_FromDomain):
    latitude: float
    longitude: float


class WaterChemistryOut(_FromDomain):
    ph: float
    dissolved_oxygen: float
    bod: float
    cod: float
    tds: float
    turbidity: float
    temperature: float


class SensorOut(_FromDomain):
    id: str
    name: str
    location: LocationOut
    water: WaterChemistryOut
    waste_level: float
    flood_risk: float
    species_count: int
    diversity_index: float
    last_updated: datetime
    status: Rating


class HealthOut(BaseModel):
    overall: int
    category: str  # Excellent | Good | Fair | Poor | Critical
    rating: Rating
    breakdown: Dict[str, int]


class WasteDetectionOut(_FromDomain):
    id: str
    severity: str
    waste_type: str
    location: str
    timestamp: datetime
    confidence: Optional[float] = None


class ForecastPointOut(_FromDomain):
    timestamp: datetime
    label: str
    risk_level: float
    water_level: float
    rainfall: float


class FloodOut(_FromDomain):
    current_risk: float
    max_risk: float
    points: List[ForecastPointOut]
    status: Literal["low", "moderate", "high"]
    last_updated: datetime


class FloodAlertOut(_FromDomain):
    id: str
    title: str
    description: str
    severity: str
    location: str
    risk_level: float
    water_level: float
    rainfall: float
    timestamp: datetime


class SafetyAlertOut(_FromDomain):
    id: str
    title: str
    description: str
    severity: str
    category: str
    location: Optional[str] = None
    timestamp: datetime


class CitizenReportOut(_FromDomain):
    id: str
    user_id: str
    user_email: str
    issue_type: str
    description: str
    location: LocationOut
    timestamp: datetime
    status: Literal["pending", "reviewed", "resolved"]


class BiodiversityOut(_FromDomain):
    id: str
    location: LocationOut
    species_count: int
    diversity_index: float
    dominant_species: List[str]
    last_updated: datetime


class WaterLevelOut(_FromDomain):
    current_level: float
    capacity: float
    status: str  # low | normal | high | critical
    last_updated: datetime


class AlertOut(_FromDomain):
    id: int
    alert_class: AlertClass
    severity: str
    entity_id: Optional[str] = None
    title: str
    body: str
    read: bool
    created_at: datetime
    read_at: Optional[datetime] = None


class SimStatusOut(BaseModel):
    running: bool
    interval_sec: float
    tick_count: int
    skipped_ticks: int
    last_update: Optional[datetime] = None
    active_alerts: Dict[str, List[str]]
