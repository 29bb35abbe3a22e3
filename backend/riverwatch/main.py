# backend/riverwatch/main.py
import logging
import random

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .alerts import ThresholdEvaluator
from .database import engine, Base, SessionLocal
from .monitor import RiverMonitor
from .notifier import BackgroundNotifier, Notifier, build_notifier
from .routes import router
from .scheduler import TickScheduler
from .simulator import SimulationEngine

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="River Watch Monitor", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------
# Monitoring session
# -----------------------------
def build_monitor(notifier: Notifier, seed=None) -> RiverMonitor:
    return RiverMonitor(
        engine=SimulationEngine(rng=random.Random(seed)),
        evaluator=ThresholdEvaluator(notifier),
    )


# deliveries (db insert, webhook POST) run off the tick thread
dispatcher = BackgroundNotifier(
    build_notifier(session_factory=SessionLocal, webhook_url=config.ALERT_WEBHOOK_URL),
    name="river-notify",
)
monitor = build_monitor(dispatcher, seed=config.SIM_SEED)
scheduler = TickScheduler(monitor.tick, interval=config.TICK_INTERVAL_SEC, name="river-sim")

app.state.monitor = monitor
app.state.scheduler = scheduler


# -----------------------------
# App lifecycle
# -----------------------------
@app.on_event("startup")
def startup():
    Base.metadata.create_all(bind=engine)

    # seeded state may already sit past a threshold
    monitor.evaluate()

    if config.AUTOSTART_SIM:
        scheduler.start()
    logger.info("River Watch monitor ready (sim running: %s)", scheduler.is_running())


@app.on_event("shutdown")
def shutdown():
    scheduler.stop()
    if not dispatcher.drain(timeout=5):
        logger.warning("Shutting down with alert deliveries still queued")
    logger.info("River Watch monitor stopped")


@app.get("/healthz")
def healthz():
    return {"ok": True}


# Main API
app.include_router(router)
