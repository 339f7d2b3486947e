from geocircle.broadcast import (
    RESUME_CIRCLE_FILL,
    SUSPEND_CENTER_HANDLE,
    SUSPEND_CIRCLE_FILL,
    SUSPEND_RADIUS_HANDLES,
    BroadcastCoordinator,
    get_default_coordinator,
    next_instance_id,
)
from geocircle.model import HandleKind


class StubCircle:
    def __init__(self, instance_id):
        self.instance_id = instance_id

    def handle_layer_ids(self):
        return [f'center-{self.instance_id}', f'radius-{self.instance_id}']


class TestBroadcastCoordinator:

    def test_register_is_idempotent(self, coordinator):
        circle = StubCircle(1)
        coordinator.register(circle)
        coordinator.register(circle)
        assert len(coordinator) == 1
        assert circle in coordinator
        assert coordinator.max_listeners == 1

    def test_unregister(self, coordinator):
        a, b = StubCircle(1), StubCircle(2)
        coordinator.register(a)
        coordinator.register(b)
        coordinator.unregister(a)
        coordinator.unregister(a)
        assert coordinator.circles == (b,)
        assert coordinator.max_listeners == 1

    def test_suspend_reaches_every_channel(self, coordinator):
        received = []
        for event in (SUSPEND_CENTER_HANDLE, SUSPEND_RADIUS_HANDLES, SUSPEND_CIRCLE_FILL):
            coordinator.subscribe(event, lambda i, k, event=event: received.append((event, i, k)))

        coordinator.suspend(7, HandleKind.CENTER)

        assert received == [
            (SUSPEND_CENTER_HANDLE, 7, HandleKind.CENTER),
            (SUSPEND_RADIUS_HANDLES, 7, HandleKind.CENTER),
            (SUSPEND_CIRCLE_FILL, 7, HandleKind.CENTER),
        ]

    def test_unsubscribe(self, coordinator):
        received = []
        coordinator.subscribe(RESUME_CIRCLE_FILL, lambda i, k: received.append(i))
        listener = coordinator._bus.listeners(RESUME_CIRCLE_FILL)[0]
        coordinator.unsubscribe(RESUME_CIRCLE_FILL, listener)
        coordinator.resume(1, HandleKind.RADIUS)
        assert received == []
        assert coordinator.listener_count(RESUME_CIRCLE_FILL) == 0

    def test_handle_layer_ids(self, coordinator):
        coordinator.register(StubCircle(3))
        coordinator.register(StubCircle(4))
        assert coordinator.handle_layer_ids() == ['center-3', 'radius-3', 'center-4', 'radius-4']


class TestInstanceIds:

    def test_ids_increase_and_never_repeat(self):
        first = next_instance_id()
        second = next_instance_id()
        assert second > first

    def test_default_coordinator_is_shared(self):
        assert get_default_coordinator() is get_default_coordinator()
