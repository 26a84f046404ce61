"""
Mixins for common functionality.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, overload

T = TypeVar("T")


class DirtyTracking:
    """
    Mixin class for tracking unsaved and unsigned changes.

    Any change to a Tracked attribute sets both flags. The flags are cleared
    only by saving the keypair file or signing a license.
    """

    def __init__(self) -> None:
        self.is_keypair_dirty: bool = False
        self.is_license_dirty: bool = False

    def mark_dirty(self) -> None:
        self.is_keypair_dirty = True
        self.is_license_dirty = True

    def _clear_keypair_dirty_flag(self) -> None:
        self.is_keypair_dirty = False

    def _clear_license_dirty_flag(self) -> None:
        self.is_license_dirty = False

    def _set_tracked(self, name: str, value: Any) -> bool:
        """Store value under the private slot of name; mark dirty only on change."""
        slot = "_" + name
        if getattr(self, slot) == value:
            return False
        setattr(self, slot, value)
        self.mark_dirty()
        return True


class Tracked(Generic[T]):
    """Descriptor for a DirtyTracking attribute backed by ``_<name>``."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @overload
    def __get__(self, obj: None, objtype: type | None = None) -> Tracked[T]: ...

    @overload
    def __get__(self, obj: DirtyTracking, objtype: type | None = None) -> T: ...

    def __get__(self, obj: DirtyTracking | None, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return getattr(obj, "_" + self.name)

    def __set__(self, obj: DirtyTracking, value: T) -> None:
        obj._set_tracked(self.name, value)  # noqa: SLF001
