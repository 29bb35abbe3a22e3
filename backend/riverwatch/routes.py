from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from sqlalchemy import desc
from datetime import datetime

from .database import get_db
from .forecast import water_level_status
from .health_engine import HealthScore
from .models import AlertRecord
from .monitor import RiverMonitor
from .scheduler import TickScheduler
from .schemas import (
    AlertOut, BiodiversityOut, CitizenReportOut, FloodAlertOut, FloodOut,
    HealthOut, SafetyAlertOut, SensorOut, SimStatusOut, WasteDetectionOut,
    WaterLevelOut,
)

router = APIRouter(prefix="/api/v1")


def get_monitor(request: Request) -> RiverMonitor:
    return request.app.state.monitor


def get_scheduler(request: Request) -> TickScheduler:
    return request.app.state.scheduler


def _health_out(h: HealthScore) -> HealthOut:
    return HealthOut(overall=h.overall, category=h.category, rating=h.rating, breakdown=h.breakdown)


# -----------------------------
# Snapshot reads
# -----------------------------
@router.get("/sensors", response_model=list[SensorOut])
def list_sensors(monitor: RiverMonitor = Depends(get_monitor)):
    return monitor.snapshot().sensors


@router.get("/sensors/{sensor_id}", response_model=SensorOut)
def get_sensor(sensor_id: str, monitor: RiverMonitor = Depends(get_monitor)):
    sensor = monitor.snapshot().sensor(sensor_id)
    if not sensor:
        raise HTTPException(status_code=404, detail="Sensor not found")
    return sensor


@router.get("/sensors/{sensor_id}/health", response_model=HealthOut)
def sensor_health(sensor_id: str, monitor: RiverMonitor = Depends(get_monitor)):
    health = monitor.sensor_health(sensor_id)
    if health is None:
        raise HTTPException(status_code=404, detail="Sensor not found")
    return _health_out(health)


@router.get("/health", response_model=HealthOut)
def river_health(monitor: RiverMonitor = Depends(get_monitor)):
    return _health_out(monitor.health())


@router.get("/waste", response_model=list[WasteDetectionOut])
def waste_feed(monitor: RiverMonitor = Depends(get_monitor)):
    return monitor.snapshot().waste_detections


@router.get("/flood", response_model=FloodOut)
def flood_forecast(monitor: RiverMonitor = Depends(get_monitor)):
    return monitor.snapshot().flood


@router.get("/flood/alerts", response_model=list[FloodAlertOut])
def flood_alerts(monitor: RiverMonitor = Depends(get_monitor)):
    return monitor.snapshot().flood_alerts


@router.get("/safety", response_model=list[SafetyAlertOut])
def safety_alerts(monitor: RiverMonitor = Depends(get_monitor)):
    return monitor.snapshot().safety_alerts


@router.get("/reports", response_model=list[CitizenReportOut])
def citizen_reports(monitor: RiverMonitor = Depends(get_monitor)):
    return monitor.snapshot().citizen_reports


@router.get("/biodiversity", response_model=list[BiodiversityOut])
def biodiversity(monitor: RiverMonitor = Depends(get_monitor)):
    return monitor.snapshot().biodiversity


@router.get("/water-level", response_model=WaterLevelOut)
def water_level(monitor: RiverMonitor = Depends(get_monitor)):
    wl = monitor.snapshot().water_level
    return WaterLevelOut(
        current_level=wl.current_level,
        capacity=wl.capacity,
        status=water_level_status(wl.current_level, wl.capacity),
        last_updated=wl.last_updated,
    )


# -----------------------------
# Delivered alerts
# -----------------------------
@router.get("/alerts", response_model=list[AlertOut])
def list_alerts(
    include_read: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    q = db.query(AlertRecord)
    if not include_read:
        q = q.filter(AlertRecord.read == False)  # noqa: E712
    return q.order_by(desc(AlertRecord.created_at), desc(AlertRecord.id)).limit(limit).all()


@router.post("/alerts/{alert_id}/read", response_model=AlertOut)
def mark_alert_read(alert_id: int, db: Session = Depends(get_db)):
    alert = db.query(AlertRecord).filter(AlertRecord.id == alert_id).first()
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    if not alert.read:
        alert.read = True
        alert.read_at = datetime.utcnow()
        db.commit()
        db.refresh(alert)
    return alert


# -----------------------------
# Simulation control
# -----------------------------
def _sim_status(monitor: RiverMonitor, scheduler: TickScheduler) -> SimStatusOut:
    a = monitor.alert_state
    return SimStatusOut(
        running=scheduler.is_running(),
        interval_sec=scheduler.interval,
        tick_count=monitor.tick_count,
        skipped_ticks=monitor.skipped_ticks,
        last_update=monitor.snapshot().last_update,
        active_alerts={
            "ph": sorted(a.ph),
            "waste": sorted(a.waste),
            "flood": sorted(a.flood),
            "safety": sorted(a.safety),
        },
    )


@router.get("/sim/status", response_model=SimStatusOut)
def sim_status(
    monitor: RiverMonitor = Depends(get_monitor),
    scheduler: TickScheduler = Depends(get_scheduler),
):
    return _sim_status(monitor, scheduler)


@router.post("/sim/start", response_model=SimStatusOut)
def sim_start(
    monitor: RiverMonitor = Depends(get_monitor),
    scheduler: TickScheduler = Depends(get_scheduler),
):
    scheduler.start()
    return _sim_status(monitor, scheduler)


@router.post("/sim/stop", response_model=SimStatusOut)
def sim_stop(
    monitor: RiverMonitor = Depends(get_monitor),
    scheduler: TickScheduler = Depends(get_scheduler),
):
    scheduler.stop()
    return _sim_status(monitor, scheduler)


@router.post("/sim/refresh", response_model=SimStatusOut)
def sim_refresh(
    monitor: RiverMonitor = Depends(get_monitor),
    scheduler: TickScheduler = Depends(get_scheduler),
):
    monitor.refresh()
    return _sim_status(monitor, scheduler)
