import logging
import os

from storyseed import create_app

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

app = create_app()


if __name__ == "__main__":
    app.run(port=int(os.environ.get("PORT", "3000")))
