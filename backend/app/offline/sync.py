"""
Synchronisation de la file offline vers le serveur.

Une passe rejoue les opérations dans l'ordre d'insertion : succès → retirée
de la file ; échec → compteur incrémenté, et l'opération est abandonnée
au bout de SYNC_MAX_RETRY_ATTEMPTS échecs. Livraison « au moins une fois »,
sans déduplication ni atomicité entre opérations.

Déclencheurs (BackgroundSync) :
- passage hors ligne → en ligne détecté par la sonde de connectivité
- toutes les SYNC_INTERVAL_SECONDS tant que le serveur est joignable
- synchronisation manuelle
"""

import logging
import threading
from typing import Optional

import httpx
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.offline.api_client import Notifier
from app.offline.network import check_connectivity
from app.offline.storage import OfflineQueue
from app.schemas.sync import QueuedOperation, SyncResult

logger = logging.getLogger(__name__)

BODY_METHODS = {"POST", "PUT"}


class SyncService:
    """Passes de synchronisation, jamais concurrentes (verrou non bloquant)."""

    def __init__(self, queue: OfflineQueue, http: httpx.Client, max_retry_attempts: Optional[int] = None):
        self.queue = queue
        self.http = http
        self.max_retry_attempts = max_retry_attempts or settings.SYNC_MAX_RETRY_ATTEMPTS
        self._lock = threading.Lock()

    @property
    def is_syncing(self) -> bool:
        return self._lock.locked()

    def sync(self) -> SyncResult:
        """Rejoue la file. Une passe demandée pendant qu'une autre tourne retourne immédiatement un échec vide."""
        if not self._lock.acquire(blocking=False):
            logger.debug("Synchronisation déjà en cours, passe ignorée")
            return SyncResult(success=False)
        try:
            return self._run_pass()
        finally:
            self._lock.release()

    def _run_pass(self) -> SyncResult:
        if not check_connectivity(self.http, settings.PING_TIMEOUT_SECONDS):
            return SyncResult(success=False)

        try:
            operations = self.queue.list_pending()
            if not operations:
                return SyncResult(success=True)

            synced = 0
            failed = 0
            for op in operations:
                if self._replay(op):
                    self.queue.remove(op.id)
                    synced += 1
                    continue

                failed += 1
                attempts = op.retry_count + 1
                if attempts >= self.max_retry_attempts:
                    self.queue.remove(op.id)
                    logger.warning(
                        "Opération %s (%s %s) abandonnée après %d échecs",
                        op.id, op.method, op.url, attempts,
                    )
                else:
                    self.queue.update_retry_count(op.id, attempts)
        except SQLAlchemyError:
            # La file locale est illisible ou verrouillée : la prochaine passe réessaiera
            logger.exception("Erreur de la file locale pendant la synchronisation")
            return SyncResult(success=False)

        logger.info("Synchronisation : %d opération(s) rejouée(s), %d échec(s)", synced, failed)
        return SyncResult(success=synced > 0, synced_count=synced, failed_count=failed)

    def _replay(self, op: QueuedOperation) -> bool:
        body = op.payload if op.method in BODY_METHODS else None
        try:
            response = self.http.request(op.method, op.url, json=body)
        except httpx.HTTPError as e:
            logger.error("Erreur lors du rejeu de l'opération %s : %s", op.id, e)
            return False
        if not response.is_success:
            logger.error("Rejeu refusé pour l'opération %s : %s %s", op.id, response.status_code, response.text)
            return False
        return True


class BackgroundSync:
    """
    Planifie les passes de synchronisation avec APScheduler :
    un job de surveillance de la connectivité et un job périodique.
    """

    def __init__(
        self,
        service: SyncService,
        notifier: Optional[Notifier] = None,
        interval_seconds: Optional[int] = None,
        watch_seconds: int = 5,
    ):
        self.service = service
        self.notifier = notifier
        self.interval_seconds = interval_seconds or settings.SYNC_INTERVAL_SECONDS
        self.watch_seconds = watch_seconds
        self.online: Optional[bool] = None
        self.scheduler = BackgroundScheduler()

    def start(self) -> None:
        self.scheduler.add_job(
            self.check_connectivity,
            trigger="interval",
            seconds=self.watch_seconds,
            id="offline_connectivity_watch",
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.periodic_sync,
            trigger="interval",
            seconds=self.interval_seconds,
            id="offline_periodic_sync",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(
            "Synchronisation en arrière-plan démarrée (sonde %ds, passe %ds)",
            self.watch_seconds, self.interval_seconds,
        )

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Synchronisation en arrière-plan arrêtée.")

    def check_connectivity(self) -> None:
        """Détecte le retour en ligne et lance alors une passe."""
        online = check_connectivity(self.service.http, settings.PING_TIMEOUT_SECONDS)
        came_back = online and self.online is False
        self.online = online
        if came_back:
            self._notify("De retour en ligne", "Synchronisation des modifications hors ligne...")
            self._report(self.service.sync(), manual=False)

    def periodic_sync(self) -> None:
        if check_connectivity(self.service.http, settings.PING_TIMEOUT_SECONDS):
            self.service.sync()

    def manual_sync(self) -> SyncResult:
        self._notify("Synchronisation", "Tentative de synchronisation des modifications hors ligne...")
        result = self.service.sync()
        self._report(result, manual=True)
        return result

    def _report(self, result: SyncResult, manual: bool) -> None:
        if result.synced_count > 0:
            self._notify("Synchronisation terminée", f"{result.synced_count} modification(s) synchronisée(s).")
        if result.failed_count > 0:
            self._notify("Problème de synchronisation", f"{result.failed_count} modification(s) non synchronisée(s).")
        if manual and result.synced_count == 0 and result.failed_count == 0:
            self._notify("Rien à synchroniser", "Aucune modification hors ligne trouvée.")

    def _notify(self, title: str, message: str) -> None:
        logger.info("%s : %s", title, message)
        if self.notifier is not None:
            self.notifier(title, message)
