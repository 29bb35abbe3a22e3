from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Location:
    latitude: float
    longitude: float


@dataclass
class WaterChemistry:
    ph: float
    dissolved_oxygen: float  # mg/L
    bod: float  # mg/L
    cod: float  # mg/L
    tds: float  # mg/L
    turbidity: float  # NTU
    temperature: float  # °C


@dataclass
class SensorReading:
    id: str
    name: str
    location: Location
    water: WaterChemistry
    waste_level: float  # 0-100
    flood_risk: float  # 0-100
    species_count: int
    diversity_index: float  # 0-1
    last_updated: datetime
    status: str = "good"  # excellent | good | fair | poor | critical


@dataclass
class WasteDetection:
    id: str
    severity: str  # low | medium | high
    waste_type: str
    location: str
    timestamp: datetime
    confidence: Optional[float] = None


@dataclass
class FloodAlert:
    id: str
    title: str
    description: str
    severity: str  # high | moderate
    location: str
    risk_level: float
    water_level: float
    rainfall: float
    timestamp: datetime


@dataclass
class SafetyAlert:
    id: str
    title: str
    description: str
    severity: str  # critical | high | moderate | low
    category: str
    location: Optional[str]
    timestamp: datetime


@dataclass
class CitizenReport:
    id: str
    user_id: str
    user_email: str
    issue_type: str
    description: str
    location: Location
    timestamp: datetime
    status: str = "pending"  # pending | reviewed | resolved


@dataclass
class BiodiversitySite:
    id: str
    location: Location
    species_count: int
    diversity_index: float
    dominant_species: List[str]
    last_updated: datetime


@dataclass
class ForecastPoint:
    timestamp: datetime
    label: str
    risk_level: float
    water_level: float  # m
    rainfall: float  # mm


@dataclass
class FloodForecast:
    current_risk: float
    max_risk: float
    points: List[ForecastPoint]
    status: str  # low | moderate | high
    last_updated: datetime


@dataclass
class WaterLevel:
    current_level: float  # m
    capacity: float  # m
    last_updated: datetime


@dataclass
class RiverState:
    """Everything the simulation owns. Replaced wholesale by each tick."""

    sensors: List[SensorReading]
    flood: FloodForecast
    water_level: WaterLevel
    biodiversity: List[BiodiversitySite] = field(default_factory=list)
    waste_detections: List[WasteDetection] = field(default_factory=list)
    flood_alerts: List[FloodAlert] = field(default_factory=list)
    safety_alerts: List[SafetyAlert] = field(default_factory=list)
    citizen_reports: List[CitizenReport] = field(default_factory=list)
    last_update: Optional[datetime] = None

    def sensor(self, sensor_id: str) -> Optional[SensorReading]:
        for s in self.sensors:
            if s.id == sensor_id:
                return s
        return None
