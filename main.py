import logging

import uvicorn

from live_orders.settings import Settings
from live_orders.web import app

if __name__ == '__main__':
    settings = Settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(threadName)s [%(name)s] %(levelname)-8s %(message)s")
    uvicorn.run(app, host=settings.host, port=settings.port)
