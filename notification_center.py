import asyncio
from collections import deque
from datetime import datetime
from typing import Dict, List, Callable, Optional, Awaitable, Tuple
from dataclasses import dataclass, field
from time_service import time_service

DEFAULT_ACTION = "DEFAULT_ACTION"  # the notification body itself was tapped
DISMISS_ACTION = "DISMISS_ACTION"


@dataclass
class NotificationAction:
    identifier: str
    title: str
    destructive: bool = False


@dataclass
class NotificationCategory:
    identifier: str
    actions: List[NotificationAction] = field(default_factory=list)


@dataclass
class NotificationContent:
    title: str
    body: str
    sound: bool = True
    category_identifier: Optional[str] = None


@dataclass
class NotificationRequest:
    identifier: str
    content: NotificationContent
    fire_at: datetime


@dataclass
class PresentationOptions:
    banner: bool = True
    sound: bool = True


class PresentationQueue:
    """Delivered reminders waiting for an open page to show them.

    Bounded in size, and entries older than max_age_seconds are discarded
    when drained, so reminders pile up neither while no page is open nor
    after one opens much later.
    """

    def __init__(self, max_items: int = 20, max_age_seconds: float = 60.0, clock=None):
        self.max_age_seconds = max_age_seconds
        self.clock = clock or time_service
        self._items = deque(maxlen=max_items)

    def __len__(self):
        return len(self._items)

    def push(self, request: NotificationRequest, options: PresentationOptions):
        self._items.append((self.clock.now(), request, options))

    def drain(self) -> List[Tuple[NotificationRequest, PresentationOptions]]:
        """Take every queued reminder that is still fresh"""
        now = self.clock.now()
        fresh = []
        while self._items:
            queued_at, request, options = self._items.popleft()
            if (now - queued_at).total_seconds() > self.max_age_seconds:
                print(f"⚠️ Dropping stale reminder {request.identifier}, no page showed it")
                continue
            fresh.append((request, options))
        return fresh


class NotificationCenter:
    """In-process stand-in for the platform notification service.

    Holds one-shot requests keyed by identifier and delivers the due ones
    from a periodic asyncio loop. Requests whose time has already passed when
    the loop first sees them are dropped without being shown.
    """

    def __init__(self, permission_handler: Optional[Callable[[], Awaitable[bool]]] = None,
                 default_permission: bool = True, check_interval_seconds: float = 30.0,
                 clock=None):
        self.permission_handler = permission_handler
        self.default_permission = default_permission
        self.check_interval_seconds = check_interval_seconds
        self.clock = clock or time_service

        self.authorization_status: Optional[bool] = None
        self.categories: Dict[str, NotificationCategory] = {}
        self.delegate = None
        self.presenter: Optional[Callable[[NotificationRequest, PresentationOptions], None]] = None

        self._pending: Dict[str, NotificationRequest] = {}
        self._running = False
        self._task = None

    async def request_authorization(self) -> bool:
        """Ask for permission to show alerts with sound"""
        try:
            if self.permission_handler is not None:
                granted = bool(await self.permission_handler())
            else:
                granted = self.default_permission
        except Exception as e:
            print(f"❌ Error requesting notification permission: {e}")
            granted = False

        self.authorization_status = granted
        print(f"🔔 Notification permission {'granted' if granted else 'denied'}")
        return granted

    def set_categories(self, categories: List[NotificationCategory]):
        self.categories = {category.identifier: category for category in categories}

    def category(self, identifier: Optional[str]) -> Optional[NotificationCategory]:
        return self.categories.get(identifier) if identifier else None

    def add(self, request: NotificationRequest, completion: Optional[Callable[[Optional[Exception]], None]] = None):
        """Register a one-shot request, replacing one with the same identifier"""
        error = None
        try:
            if not request.identifier:
                raise ValueError("Notification request needs an identifier")
            if self.authorization_status is False:
                raise PermissionError("Notifications are not authorized")
            self._pending[request.identifier] = request
        except Exception as e:
            error = e

        if completion is not None:
            completion(error)

    def remove_all_pending(self):
        count = len(self._pending)
        self._pending.clear()
        if count:
            print(f"🔕 Removed {count} pending notifications")

    def remove_pending(self, identifiers: List[str]):
        for identifier in identifiers:
            self._pending.pop(identifier, None)

    def pending_requests(self) -> List[NotificationRequest]:
        return sorted(self._pending.values(), key=lambda request: (request.fire_at, request.identifier))

    def deliver_due(self, now: Optional[datetime] = None, last_check: Optional[datetime] = None) -> List[NotificationRequest]:
        """Pop and present every request that is due.

        With last_check, requests that were already overdue before the
        previous tick are dropped silently instead of presented.
        """
        now = now or self.clock.now()
        due = [request for request in self.pending_requests() if request.fire_at <= now]

        delivered = []
        for request in due:
            del self._pending[request.identifier]
            if last_check is not None and request.fire_at < last_check:
                continue
            self._present(request)
            delivered.append(request)
        return delivered

    def _present(self, request: NotificationRequest):
        options = PresentationOptions()
        if self.delegate is not None:
            options = self.delegate.will_present(request)

        print(f"🔔 Delivering {request.identifier}: {request.content.title}")
        if self.presenter is not None:
            try:
                self.presenter(request, options)
            except Exception as e:
                print(f"❌ Error presenting notification {request.identifier}: {e}")

    def respond(self, identifier: str, action_identifier: str):
        """Route an action tap to the delegate and wait for its acknowledgement"""
        acknowledged = []

        def completion_handler():
            acknowledged.append(True)

        if self.delegate is None:
            print(f"⚠️ No delegate for action {action_identifier} on {identifier}")
            return False

        self.delegate.did_receive(action_identifier, completion_handler)
        if not acknowledged:
            print(f"⚠️ Action {action_identifier} on {identifier} was not acknowledged")
        return bool(acknowledged)

    async def _delivery_loop(self):
        """Main delivery loop"""
        # Anything already overdue at startup never fires
        last_check = self.clock.now()
        while self._running:
            try:
                now = self.clock.now()
                self.deliver_due(now, last_check)
                last_check = now
            except Exception as e:
                print(f"❌ Error in notification delivery: {e}")

            try:
                await asyncio.sleep(self.check_interval_seconds)
            except asyncio.CancelledError:
                print("Notification loop cancelled")
                break

    async def start(self):
        """Start the delivery loop"""
        if not self._running:
            self._running = True
            self._task = asyncio.create_task(self._delivery_loop())
            print("⏰ Notification center started")

    async def stop(self):
        """Stop the delivery loop"""
        self._running = False

        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await asyncio.wait_for(self._task, timeout=2.0)
            except (asyncio.CancelledError, asyncio.TimeoutError):
                pass

        self._task = None
