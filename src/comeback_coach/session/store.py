"""Wizard session state mirrored to a storage slot on every change."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from comeback_coach.config import SESSION_KEY
from comeback_coach.models.analysis import Roadmap
from comeback_coach.models.session import SessionState, Step
from comeback_coach.session.storage import Storage

logger = logging.getLogger(__name__)

EXIT_WARNING = "You have an active session. Leaving will lose all progress."

Listener = Callable[[SessionState], None]


class SessionStore:
    """Owns one user's SessionState and keeps the storage slot in sync.

    Every mutation writes the full state to the slot; ``clear_session``
    deletes the slot instead.
    """

    def __init__(self, storage: Storage, key: str = SESSION_KEY):
        self.storage = storage
        self.key = key
        self._listeners: list[Listener] = []
        self._state = self._load()

    @property
    def state(self) -> SessionState:
        return self._state

    def _load(self) -> SessionState:
        raw = self.storage.get_item(self.key)
        if raw is None:
            return SessionState()
        try:
            return SessionState.model_validate_json(raw)
        except ValidationError:
            logger.error("Error loading session state, starting fresh", exc_info=True)
            return SessionState()

    def snapshot(self) -> str | None:
        """The raw persisted JSON, or None when nothing is stored."""
        return self.storage.get_item(self.key)

    def _commit(self, state: SessionState, *, persist: bool = True) -> None:
        self._state = state
        if persist:
            self.storage.set_item(self.key, state.model_dump_json(by_alias=True, exclude_none=True))
        else:
            self.storage.remove_item(self.key)
        for listener in list(self._listeners):
            listener(state)

    def update_session(self, **updates) -> None:
        """Merge field updates (snake_case or camelCase names) into the state."""
        known = set(SessionState.model_fields) | {
            f.alias for f in SessionState.model_fields.values() if f.alias
        }
        unknown = set(updates) - known
        if unknown:
            raise ValueError(f"Unknown session fields: {', '.join(sorted(unknown))}")

        merged = self._state.model_dump(by_alias=True)
        for name, value in updates.items():
            field = SessionState.model_fields.get(name)
            merged[field.alias if field and field.alias else name] = value
        self._commit(SessionState.model_validate(merged))

    def start_session(self, step: Step) -> None:
        self.update_session(has_active_session=True, current_step=step)

    def set_resume(self, resume_data: str, roadmap_weeks: int) -> None:
        """Start over with a new resume, dropping every earlier result."""
        self._commit(
            SessionState(
                has_active_session=True,
                current_step="resume-input",
                resume_data=resume_data,
                roadmap_weeks=roadmap_weeks,
            )
        )

    def clear_session(self) -> None:
        self._commit(SessionState(), persist=False)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def should_warn_on_exit(self) -> bool:
        return self._state.has_active_session and self._state.current_step != "idle"

    def is_demo_mode(self) -> bool:
        roadmap = self._state.roadmap_data
        if roadmap is None:
            return False
        return roadmap.source == "demo" or roadmap.restored_from == "dev"

    def restore_from_roadmap_file(self, path: str | Path) -> None:
        """Resume interview practice from a previously exported roadmap PDF."""
        p = Path(path)
        if p.suffix.lower() != ".pdf":
            raise ValueError("Please upload a valid PDF file.")
        self.update_session(
            has_active_session=True,
            roadmap_data=Roadmap(restored_from=p.name, timestamp=datetime.now().isoformat()),
            current_step="interview",
        )
