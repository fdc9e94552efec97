from typing import Any, Sequence

import pytest

from lightroom_midi.core import LightroomApi


class FakeLightroom(LightroomApi):
    """Records every request instead of talking to Lightroom."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[Any]]] = []
        self.failures: dict[str, Exception] = {}
        self.responses: dict[str, Any] = {}

    async def send(self, message: str, params: Sequence[Any] = ()) -> Any:
        self.calls.append((message, list(params)))
        failure = self.failures.get(message)
        if failure is not None:
            raise failure
        return self.responses.get(message)

    @property
    def messages(self) -> list[str]:
        return [message for message, _ in self.calls]


class FakeScheduler:
    """Stands in for ``loop.call_later`` so timeouts fire on demand."""

    class Handle:
        def __init__(self, delay: float, callback, args) -> None:
            self.delay = delay
            self.callback = callback
            self.args = args
            self.cancelled = False

        def cancel(self) -> None:
            self.cancelled = True

    def __init__(self) -> None:
        self.handles: list["FakeScheduler.Handle"] = []

    def __call__(self, delay: float, callback, *args) -> "FakeScheduler.Handle":
        handle = self.Handle(delay, callback, args)
        self.handles.append(handle)
        return handle

    def fire_all(self) -> None:
        for handle in list(self.handles):
            if not handle.cancelled:
                handle.cancelled = True
                handle.callback(*handle.args)


@pytest.fixture
def fake_lightroom() -> FakeLightroom:
    return FakeLightroom()


@pytest.fixture
def fake_scheduler() -> FakeScheduler:
    return FakeScheduler()
