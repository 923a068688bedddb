import os

import uvicorn

from smart_categorizer.app import create_app
from smart_categorizer.logger import get_logging_config

app = create_app()


def run() -> None:
    uvicorn.run(
        app,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_config=get_logging_config(),
    )


if __name__ == "__main__":
    run()
