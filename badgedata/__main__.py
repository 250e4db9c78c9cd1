import uvicorn

from badgedata.config import get_settings

settings = get_settings()

uvicorn.run(
    "badgedata.main:app",
    host=settings.api_host,
    port=settings.api_port,
    log_config=None,
)
