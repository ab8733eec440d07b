"""Public facade."""

from panelwise.api.facade import Panelwise

__all__ = ["Panelwise"]
