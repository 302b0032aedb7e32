import logging
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from calpanel.observability.logger import init_sentry
from calpanel.routes.health import router as health_router
from calpanel.routes.widget import router as widget_router
from calpanel.widget.calendar_widget import get_widget

logger = logging.getLogger("calpanel")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="calpanel")

# Fetch trigger (runs in a background thread)
scheduler = BackgroundScheduler()
FETCH_JOB_ID = "calendar_fetch"


def fetch_job():
    try:
        get_widget().refresh()
    except Exception as e:
        logger.exception(f"fetch_job failed: {e}")


@app.on_event("startup")
async def _startup():
    init_sentry()

    widget = get_widget()
    await widget.enable()

    interval = widget.config.refresh_interval
    fetch_interval = widget.config.fetch_interval
    if fetch_interval > 0:
        scheduler.add_job(
            fetch_job,
            "interval",
            id=FETCH_JOB_ID,
            seconds=fetch_interval,
            next_run_time=datetime.now(),
            replace_existing=True,
        )
        scheduler.start()
        logger.info(f"Fetch scheduler started every {fetch_interval}s, re-render every {interval}s")
    else:
        logger.info("Fetch scheduler disabled (GCAL_FETCH_INTERVAL=0)")


@app.on_event("shutdown")
async def _shutdown():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Fetch scheduler stopped")
    await get_widget().close()


app.include_router(widget_router, tags=["widget"])
app.include_router(health_router, tags=["health"])


@app.get("/")
def health():
    return {"status": "ok"}
