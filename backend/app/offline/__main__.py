"""
Agent de synchronisation du poste de travail.
Démarrage : python -m app.offline [--once]
"""

import argparse
import logging
import time

from app.config import settings
from app.offline.api_client import build_http_client
from app.offline.storage import OfflineQueue, open_local_db
from app.offline.sync import BackgroundSync, SyncService

logger = logging.getLogger("app.offline")


def main() -> None:
    parser = argparse.ArgumentParser(description="Synchronise la file d'écritures offline avec le serveur.")
    parser.add_argument("--once", action="store_true", help="Une seule passe manuelle puis arrêt")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s : %(message)s")

    queue = OfflineQueue(open_local_db())
    service = SyncService(queue, build_http_client())
    agent = BackgroundSync(service)

    if args.once:
        result = agent.manual_sync()
        logger.info("Passe terminée : %s", result.model_dump())
        return

    logger.info("Agent démarré : serveur %s, %d opération(s) en attente", settings.API_BASE_URL, queue.pending_count())
    agent.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        agent.stop()


if __name__ == "__main__":
    main()
