"""
Orchestrator Registry

One `ReservationOrchestrator` per browser client (`X-Client-Id`). Each
orchestrator gets its own auth session, client storage namespace and
notification broadcaster; the RPC gateway and the realtime client are shared.

Clients that go away without `DELETE /session` are reclaimed by
`run_idle_sweep`: an orchestrator with no request for CLIENT_IDLE_TIMEOUT_SECONDS
and no open stream is disposed.
"""

import asyncio
import time
from typing import Callable, Dict, List, Optional

import anyio

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.event.in_memory_broadcaster import InMemoryEventBroadcasterImpl
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.platform.realtime.i_realtime_client import IRealtimeClient
from lodgetix.service.reservation.app.interface import (
    IClientStorage,
    IReservationRpcGateway,
    ISessionGateway,
)
from lodgetix.service.reservation.app.reservation_cache import ReservationCache
from lodgetix.service.reservation.app.reservation_orchestrator import ReservationOrchestrator
from lodgetix.service.reservation.app.session_bootstrap import SessionBootstrap


class OrchestratorRegistry:
    def __init__(
        self,
        *,
        rpc_gateway: IReservationRpcGateway,
        realtime_client: IRealtimeClient,
        session_gateway_factory: Callable[..., ISessionGateway],
        client_storage_factory: Callable[..., IClientStorage],
        idle_timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rpc_gateway = rpc_gateway
        self.realtime_client = realtime_client
        self.session_gateway_factory = session_gateway_factory
        self.client_storage_factory = client_storage_factory
        self.idle_timeout_seconds = (
            idle_timeout_seconds
            if idle_timeout_seconds is not None
            else settings.CLIENT_IDLE_TIMEOUT_SECONDS
        )
        self.clock = clock
        self._orchestrators: Dict[str, ReservationOrchestrator] = {}
        self._last_used: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._orchestrators)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._orchestrators

    def _create(self, client_id: str) -> ReservationOrchestrator:
        return ReservationOrchestrator(
            rpc_gateway=self.rpc_gateway,
            session_bootstrap=SessionBootstrap(session_gateway=self.session_gateway_factory()),
            realtime_client=self.realtime_client,
            reservation_cache=ReservationCache(
                storage=self.client_storage_factory(client_id=client_id)
            ),
            broadcaster=InMemoryEventBroadcasterImpl(),
            client_id=client_id,
        )

    def get(self, client_id: str) -> Optional[ReservationOrchestrator]:
        return self._orchestrators.get(client_id)

    def get_or_create(self, client_id: str) -> ReservationOrchestrator:
        orchestrator = self._orchestrators.get(client_id)
        if orchestrator is None or orchestrator.disposed:
            orchestrator = self._create(client_id)
            self._orchestrators[client_id] = orchestrator
            Logger.base.info(f'🆕 [REGISTRY] Orchestrator created for client {client_id}')
        self._last_used[client_id] = self.clock()
        return orchestrator

    async def dispose(self, client_id: str) -> bool:
        self._last_used.pop(client_id, None)
        orchestrator = self._orchestrators.pop(client_id, None)
        if orchestrator is None:
            return False
        await orchestrator.dispose()
        return True

    async def dispose_idle(self) -> List[str]:
        """
        Dispose every orchestrator idle longer than `idle_timeout_seconds`.

        An orchestrator with an open stream counts as in use and its idle
        time restarts. Returns the disposed client ids.
        """
        now = self.clock()
        expired: List[str] = []
        for client_id, orchestrator in list(self._orchestrators.items()):
            if orchestrator.has_open_streams():
                self._last_used[client_id] = now
                continue
            if now - self._last_used.get(client_id, now) >= self.idle_timeout_seconds:
                expired.append(client_id)

        for client_id in expired:
            try:
                await self.dispose(client_id)
            except Exception as e:
                Logger.base.error(f'❌ [REGISTRY] Disposing idle client {client_id} failed: {e}')

        if expired:
            Logger.base.info(
                f'🧹 [REGISTRY] Disposed {len(expired)} idle orchestrators '
                f'({len(self._orchestrators)} remaining)'
            )
        return expired

    async def run_idle_sweep(self, *, interval_seconds: Optional[float] = None) -> None:
        """Background loop for the application lifespan; runs until cancelled"""
        interval = interval_seconds or settings.CLIENT_IDLE_SWEEP_INTERVAL_SECONDS
        while True:
            await anyio.sleep(interval)
            try:
                await self.dispose_idle()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                Logger.base.error(f'❌ [REGISTRY] Idle sweep failed: {e}')

    async def dispose_all(self) -> None:
        orchestrators = list(self._orchestrators.values())
        self._orchestrators.clear()
        self._last_used.clear()
        for orchestrator in orchestrators:
            try:
                await orchestrator.dispose()
            except Exception as e:
                Logger.base.error(
                    f'❌ [REGISTRY] Disposing client {orchestrator.client_id} failed: {e}'
                )
        Logger.base.info(f'🧹 [REGISTRY] Disposed {len(orchestrators)} orchestrators')
