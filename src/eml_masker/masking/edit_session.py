"""
Edit-session state machine: selection, menu, mask/unmask.

    IDLE -> SELECTING -> MENU_OPEN -> APPLYING -> IDLE
                              \\-> IDLE (pointer down elsewhere, cancel)

Only one field can have its menu open at a time.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from ..models.fields import DisplayField
from .bits_store import MaskBitsStore
from .selection import RenderedField, SelectionPoint, resolve_selection

logger = structlog.get_logger(__name__)


class EditState(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    MENU_OPEN = "menu_open"
    APPLYING = "applying"


class MaskAction(str, Enum):
    MASK = "mask"
    UNMASK = "unmask"


@dataclass(frozen=True)
class PendingMenu:
    """A resolved selection awaiting a Mask/Unmask choice."""

    field: DisplayField
    start: int
    end: int
    mask_state: str  # "masked" | "unmasked" | "partial"


class EditSession:
    """
    Tracks the user's selection and the menu it opens, and applies the chosen
    action to a MaskBitsStore.
    """

    def __init__(self, store: MaskBitsStore):
        self.store = store
        self.state = EditState.IDLE
        self.active_field: Optional[DisplayField] = None
        self.menu: Optional[PendingMenu] = None

    def _to_idle(self) -> None:
        self.state = EditState.IDLE
        self.active_field = None
        self.menu = None

    def pointer_down(self, field: Optional[DisplayField], on_menu: bool = False) -> EditState:
        """
        Handle a pointer press.

        Args:
            field: Field under the pointer, or None outside every field
            on_menu: The press landed on the open menu

        Returns:
            The new state
        """
        if on_menu and self.state is EditState.MENU_OPEN:
            return self.state
        if field is None:
            self._to_idle()
            return self.state
        # A new drag closes whatever menu was open, in this field or another
        self.state = EditState.SELECTING
        self.active_field = field
        self.menu = None
        return self.state

    def complete_selection(
        self, rendered: RenderedField, anchor: SelectionPoint, focus: SelectionPoint
    ) -> Optional[PendingMenu]:
        """
        Finish a selection and open the menu for it when it is usable.

        Args:
            rendered: Rendered text nodes of the selected field
            anchor: Drag start
            focus: Drag end

        Returns:
            The open menu, or None (state goes back to IDLE)
        """
        field = rendered.field
        maskable = self.store.maskable_range(field)
        resolved = resolve_selection(
            rendered, anchor, focus, self.store.text(field), maskable_range=maskable
        )
        if resolved is None:
            self._to_idle()
            return None

        mask_state = self.store.selection_state(field, resolved.start, resolved.end)
        self.state = EditState.MENU_OPEN
        self.active_field = field
        self.menu = PendingMenu(
            field=field, start=resolved.start, end=resolved.end, mask_state=mask_state
        )
        return self.menu

    def apply(self, action: MaskAction) -> bool:
        """
        Apply Mask or Unmask to the open menu's range.

        Returns:
            True if the store was mutated; False when no menu is open
        """
        if self.state is not EditState.MENU_OPEN or self.menu is None:
            logger.debug("apply_without_menu", state=self.state.value)
            return False
        menu = self.menu
        self.state = EditState.APPLYING
        try:
            applied = self.store.set_range(
                menu.field, menu.start, menu.end, reveal=action is MaskAction.UNMASK
            )
        finally:
            self._to_idle()
        return applied

    def cancel(self) -> None:
        self._to_idle()
