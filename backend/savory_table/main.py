import logging

from fastapi import FastAPI

from .config import get_settings
from .routers import notifications, reservations, reviews, slots
from .utils.request_id import request_id_middleware

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="The Savory Table API")

app.middleware("http")(request_id_middleware)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(slots.router)
app.include_router(reservations.router)
app.include_router(notifications.router)
app.include_router(reviews.router)
