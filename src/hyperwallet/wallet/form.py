"""
Editable input state for one ABI action.

Each field is held twice: the text the user sees and edits (``display``) and
the value sent to the ledger (``encoded``). They differ only for ``[]uint8``
fields, where ``encoded`` is the base64 form of ``display``.

Values are keyed by field name and survive a switch to another action, so a
``to`` typed for one action is still there for the next action that has a
``to`` field.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from ..ledger.abi import ABI, FieldDef
from .codec import to_encoded
from .defaults import is_supported, resolve_default

logger = logging.getLogger(__name__)

FormListener = Callable[["ActionFormState"], None]


class ActionFormState:
    def __init__(self, abi: Optional[ABI] = None) -> None:
        self.abi = abi
        self.action_name: Optional[str] = None
        self.fields: tuple[FieldDef, ...] = ()
        self.warnings: list[str] = []
        self._display: dict[str, str] = {}
        self._encoded: dict[str, str] = {}
        self._listeners: list[FormListener] = []

    @property
    def display(self) -> dict[str, str]:
        return dict(self._display)

    @property
    def encoded(self) -> dict[str, str]:
        return dict(self._encoded)

    def subscribe(self, listener: FormListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def select(self, action_name: str) -> bool:
        """Make ``action_name`` the current action and seed its fields.

        Raises:
            KeyError: If the ABI has no such action or no type for it
        """
        if self.abi is None:
            raise KeyError("No ABI loaded")
        if self.abi.action(action_name) is None:
            raise KeyError(f"Action not found: {action_name}")
        type_def = self.abi.type_for(action_name)
        if type_def is None:
            raise KeyError(f"No type describes action {action_name}")
        self.action_name = action_name
        return self.seed(type_def.fields)

    def seed(self, fields: Iterable[FieldDef]) -> bool:
        """Fill in defaults for fields not held yet.

        Returns True if anything changed. Listeners are only notified then,
        so a listener that re-seeds on every notification settles after one
        round.
        """
        self.fields = tuple(fields)
        self.warnings = [
            f"Warning: Array type not supported for {field.name}"
            for field in self.fields
            if not is_supported(field.type)
        ]

        changed = False
        for field in self.fields:
            if not is_supported(field.type):
                continue
            if field.name not in self._display:
                self._display[field.name] = resolve_default(field.type)
            # a name shared with another action may carry a different type
            encoded = to_encoded(field.type, self._display[field.name])
            if self._encoded.get(field.name) != encoded:
                self._encoded[field.name] = encoded
                changed = True

        if changed:
            logger.debug("Seeded fields for %s: %s", self.action_name, sorted(self._display))
            self._notify()
        return changed

    def set(self, field_name: str, field_type: str, value: str) -> None:
        if not is_supported(field_type):
            raise ValueError(f"Array type not supported for {field_name}")
        self._display[field_name] = value
        self._encoded[field_name] = to_encoded(field_type, value)
        self._notify()

    def set_many(self, values: dict[str, str]) -> None:
        """Set several current-action fields by name.

        Raises:
            KeyError: If a name is not a field of the current action
        """
        by_name = {field.name: field for field in self.fields}
        for name, value in values.items():
            if name not in by_name:
                raise KeyError(f"{self.action_name} has no field {name}")
            self.set(name, by_name[name].type, value)

    def snapshot(self) -> dict[str, str]:
        """Encoded values of the current action's editable fields, in ABI order."""
        return {
            field.name: self._encoded[field.name]
            for field in self.fields
            if is_supported(field.type) and field.name in self._encoded
        }

    def log_view(self) -> dict[str, str]:
        """Current action's values as the user typed them."""
        return {
            field.name: self._display[field.name]
            for field in self.fields
            if is_supported(field.type) and field.name in self._display
        }
