import os

from knot.config import settings
from knot.main import app


def main() -> None:
    import uvicorn

    host = os.getenv("KNOT_HOST", settings.HOST)
    port = int(os.getenv("KNOT_PORT", str(settings.PORT)))
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
