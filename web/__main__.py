import uvicorn

from serviceops.logging import configure_logging
from serviceops.settings import settings


def main() -> None:
    configure_logging()
    # log_config=None keeps uvicorn from replacing the root handlers
    uvicorn.run("web.app:app", host=settings.web_host, port=settings.web_port, log_config=None)


if __name__ == "__main__":
    main()
