import logging

from geocircle.events import EventEmitter


class TestEventEmitter:

    def test_emit_in_registration_order(self):
        emitter = EventEmitter()
        calls = []
        emitter.on('x', lambda v: calls.append(('a', v)))
        emitter.on('x', lambda v: calls.append(('b', v)))
        assert emitter.emit('x', 1) is True
        assert calls == [('a', 1), ('b', 1)]

    def test_emit_without_listeners(self):
        assert EventEmitter().emit('x') is False

    def test_once(self):
        emitter = EventEmitter()
        calls = []
        emitter.once('x', calls.append)
        emitter.emit('x', 1)
        emitter.emit('x', 2)
        assert calls == [1]
        assert emitter.listener_count('x') == 0

    def test_off(self):
        emitter = EventEmitter()
        calls = []
        emitter.on('x', calls.append)
        emitter.off('x', calls.append)
        emitter.emit('x', 1)
        assert calls == []

    def test_failing_listener_does_not_stop_others(self, caplog):
        emitter = EventEmitter()
        calls = []

        def broken(_):
            raise ValueError("boom")

        emitter.on('x', broken)
        emitter.on('x', calls.append)
        with caplog.at_level(logging.ERROR, logger='geocircle.events'):
            emitter.emit('x', 1)
        assert calls == [1]
        assert "Error in listener for x" in caplog.text

    def test_leak_warning(self, caplog):
        emitter = EventEmitter(max_listeners=1)
        with caplog.at_level(logging.WARNING, logger='geocircle.events'):
            emitter.on('x', print)
            emitter.on('x', repr)
        assert "Possible listener leak" in caplog.text

    def test_unlimited_listeners(self, caplog):
        emitter = EventEmitter()
        emitter.set_max_listeners(0)
        with caplog.at_level(logging.WARNING, logger='geocircle.events'):
            for _ in range(20):
                emitter.on('x', print)
        assert "Possible listener leak" not in caplog.text
