from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from proofread.app.actions import Action, ActionSet
from proofread.app.ui_scheduler import UiScheduler
from proofread.domain.models import ModelDescriptor, Prompt
from proofread.domain.ports import AlertKind, ContentCallback, ContentKind
from proofread.domain.registry import Registry


class FakeClock:
    """Manual ``after``/``after_cancel`` pair driven by ``advance``."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._timers: Dict[str, Tuple[int, Callable[[], None]]] = {}
        self._next = 0
        self.cancelled: List[str] = []

    def after(self, delay_ms: int, callback: Callable[[], None]) -> str:
        self._next += 1
        token = f"after#{self._next}"
        self._timers[token] = (self.now_ms + delay_ms, callback)
        return token

    def after_cancel(self, token: str) -> None:
        self.cancelled.append(token)
        self._timers.pop(token, None)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            due = sorted(
                (when, token) for token, (when, _) in self._timers.items() if when <= target
            )
            if not due:
                break
            when, token = due[0]
            _, callback = self._timers.pop(token)
            self.now_ms = when
            callback()
        self.now_ms = target


def make_ui() -> Tuple[UiScheduler, FakeClock]:
    clock = FakeClock()
    return UiScheduler(clock.after, clock.after_cancel), clock


class ManualExecutor:
    """Executor whose jobs run only when the test says so."""

    def __init__(self) -> None:
        self.jobs: List[Tuple[Future, Callable[..., Any], tuple]] = []
        self.submitted = 0

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        future: Future = Future()
        self.jobs.append((future, fn, args))
        self.submitted += 1
        return future

    def run_all(self) -> None:
        jobs, self.jobs = self.jobs, []
        for future, fn, args in jobs:
            try:
                result = fn(*args)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)


class _WaitHandle:
    def __init__(self, owner: "SurfaceRecorder", message: str) -> None:
        self.owner = owner
        self.message = message
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        self.owner.open_indicators -= 1


class SurfaceRecorder:
    """Composer surface double recording every interaction."""

    def __init__(self, text: Optional[str] = "Hello wrld", *, deliver_now: bool = True) -> None:
        self.text = text
        self.content_error: Optional[BaseException] = None
        self.deliver_now = deliver_now
        self.pending_content: List[ContentCallback] = []
        self.content_requests: List[ContentKind] = []
        self.insertions: List[Tuple[str, ContentKind]] = []
        self.alerts: List[Tuple[AlertKind, str]] = []
        self.indicators: List[_WaitHandle] = []
        self.open_indicators = 0
        self.alive = True
        self.installed: List[ActionSet] = []
        self.popups: List[Tuple[Action, ...]] = []
        self._popup_callbacks: List[Callable[[Action], None]] = []

    def get_content(self, kind: ContentKind, callback: ContentCallback) -> None:
        self.content_requests.append(kind)
        if self.deliver_now:
            callback(self.text, self.content_error)
        else:
            self.pending_content.append(callback)

    def deliver_content(self) -> None:
        callbacks, self.pending_content = self.pending_content, []
        for callback in callbacks:
            callback(self.text, self.content_error)

    def insert_content(self, text: str, kind: ContentKind) -> None:
        self.insertions.append((text, kind))

    def submit_alert(self, kind: AlertKind, message: str) -> None:
        self.alerts.append((kind, message))

    def open_wait_indicator(self, message: str) -> _WaitHandle:
        handle = _WaitHandle(self, message)
        self.indicators.append(handle)
        self.open_indicators += 1
        return handle

    def is_alive(self) -> bool:
        return self.alive

    def install_actions(self, action_set: ActionSet) -> None:
        self.installed.append(action_set)

    def popup_menu(self, actions: Sequence[Action], on_select: Callable[[Action], None]) -> None:
        self.popups.append(tuple(actions))
        self._popup_callbacks.append(on_select)

    def pick_from_popup(self, index: int) -> None:
        self._popup_callbacks[-1](self.popups[-1][index])


def sample_prompts() -> Tuple[Prompt, ...]:
    return (
        Prompt(id="fix-grammar", display_name="Fix grammar", prompt_text="Fix grammar and spelling."),
        Prompt(id="formal", display_name="Make formal", prompt_text="Rewrite in a formal tone."),
    )


def make_registry(**overrides: Any) -> Registry:
    params: Dict[str, Any] = dict(
        prompts=sample_prompts(),
        models=[ModelDescriptor("gpt-4o"), ModelDescriptor("gpt-4o-mini")],
        api_key="sk-test",
        current_model="gpt-4o",
    )
    params.update(overrides)
    return Registry(**params)


__all__ = [
    "FakeClock",
    "ManualExecutor",
    "SurfaceRecorder",
    "make_registry",
    "make_ui",
    "sample_prompts",
]
