"""Battery status providers and the monitor that forwards their changes."""

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import Optional, Protocol

import psutil

from repo_pulse.models.battery import BatteryState, BatteryStatus

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]
BatteryListener = Callable[[BatteryStatus], None]


class Subscription:
    """Handle for one change-notification registration."""

    def __init__(self, unsubscribe: Callable[["Subscription"], None], callback: ChangeCallback):
        self.callback = callback
        self._unsubscribe = unsubscribe
        self.active = True

    def cancel(self) -> None:
        """Unregister. Calling it more than once is harmless."""
        if self.active:
            self.active = False
            self._unsubscribe(self)


class BatteryProvider(Protocol):
    """Source of battery readings with change notifications."""

    def read(self) -> BatteryStatus:
        """Return the current battery status."""
        ...

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Call ``callback`` (possibly from another thread) whenever the status changes."""
        ...


class _ObservableProvider:
    """Subscriber bookkeeping shared by the concrete providers."""

    def __init__(self):
        self._subscriptions: list[Subscription] = []
        self._subscriptions_lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._subscriptions_lock:
            return len(self._subscriptions)

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        subscription = Subscription(self._remove, callback)
        with self._subscriptions_lock:
            self._subscriptions.append(subscription)
        self._on_subscribed()
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._subscriptions_lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
            remaining = len(self._subscriptions)
        if remaining == 0:
            self._on_idle()

    def _notify(self) -> None:
        with self._subscriptions_lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            if subscription.active:
                subscription.callback()

    def _on_subscribed(self) -> None:
        pass

    def _on_idle(self) -> None:
        pass


class InMemoryBatteryProvider(_ObservableProvider):
    """Battery provider whose readings are set by the caller."""

    def __init__(self, level: float | None = None, state: BatteryState = BatteryState.UNKNOWN):
        super().__init__()
        self._status = BatteryStatus.from_reading(level, state)

    def read(self) -> BatteryStatus:
        return self._status

    def set(self, level: float | None, state: BatteryState) -> None:
        """Update the reading; subscribers are notified only if it changed."""
        status = BatteryStatus.from_reading(level, state)
        if status == self._status:
            return
        self._status = status
        self._notify()


class PsutilBatteryProvider(_ObservableProvider):
    """Battery provider backed by ``psutil.sensors_battery()``.

    psutil has no push API, so while anyone is subscribed the provider polls
    on the running event loop and notifies when the reading changes.
    """

    def __init__(self, poll_interval: float = 5.0):
        super().__init__()
        self.poll_interval = poll_interval
        self._last: Optional[BatteryStatus] = None
        self._task: Optional[asyncio.Task] = None

    def read(self) -> BatteryStatus:
        try:
            battery = psutil.sensors_battery()
        except (AttributeError, NotImplementedError, OSError, psutil.Error) as e:
            logger.debug("Battery sensor unavailable: %s", e)
            return BatteryStatus.unknown()

        if battery is None:
            return BatteryStatus.unknown()

        level = battery.percent / 100.0 if battery.percent is not None else None
        if battery.power_plugged is None:
            state = BatteryState.UNKNOWN
        elif battery.power_plugged:
            state = BatteryState.FULL if level == 1.0 else BatteryState.CHARGING
        else:
            state = BatteryState.UNPLUGGED
        return BatteryStatus.from_reading(level, state)

    def _on_subscribed(self) -> None:
        if self._task is None or self._task.done():
            self._last = self.read()
            self._task = asyncio.get_running_loop().create_task(self._poll())

    def _on_idle(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            status = self.read()
            if status != self._last:
                self._last = status
                self._notify()


class BatteryMonitor:
    """Forwards battery changes from a provider to a single listener.

    Notifications may arrive on any thread; the listener is always called on
    the event loop that called ``start()``.
    """

    def __init__(self, provider: BatteryProvider):
        self.provider = provider
        self._subscription: Optional[Subscription] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._token: Optional[object] = None

    @property
    def is_active(self) -> bool:
        return self._subscription is not None

    def snapshot(self) -> BatteryStatus:
        """Read the current status directly from the provider."""
        return self.provider.read()

    def start(self, listener: BatteryListener) -> None:
        """Subscribe ``listener`` to battery changes, replacing any earlier subscription."""
        self.stop()
        self._loop = asyncio.get_running_loop()

        # Each subscription gets its own token so that deliveries queued for an
        # older subscription are dropped
        token = object()
        self._token = token
        self._subscription = self.provider.subscribe(
            lambda: self._schedule(token, listener)
        )
        logger.debug("Battery monitoring started")

    def stop(self) -> None:
        """Unsubscribe. Safe to call when not started."""
        self._token = None
        if self._subscription is None:
            return
        self._subscription.cancel()
        self._subscription = None
        logger.debug("Battery monitoring stopped")

    def _schedule(self, token: object, listener: BatteryListener) -> None:
        loop = self._loop
        if loop is None or token is not self._token:
            return
        try:
            loop.call_soon_threadsafe(self._deliver, token, listener)
        except RuntimeError:
            logger.debug("Event loop closed; dropping battery notification")

    def _deliver(self, token: object, listener: BatteryListener) -> None:
        if token is not self._token:
            return
        status = self.snapshot()
        try:
            listener(status)
        except Exception:
            logger.exception("Battery listener failed")
