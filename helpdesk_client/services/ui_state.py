"""Navigation chrome state, created per view tree and passed down explicitly."""

from __future__ import annotations

from dataclasses import dataclass

from helpdesk_client.core.storage import SIDEBAR_PINNED_KEY, LocalStorage


@dataclass(frozen=True)
class NavItem:
    title: str
    href: str


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem("Dashboard", "/dashboard"),
    NavItem("Tickets", "/ticket"),
    NavItem("Users", "/user"),
)


class SidebarState:
    def __init__(self, storage: LocalStorage) -> None:
        self.storage = storage
        self.pinned = storage.get(SIDEBAR_PINNED_KEY) == "true"
        self.hovered = False
        self.mobile_open = False
        self.settings_open = False

    @property
    def expanded(self) -> bool:
        return self.pinned or self.hovered

    @property
    def content_padding(self) -> str:
        return "pl-64" if self.expanded else "pl-16"

    def toggle_pin(self) -> bool:
        self.pinned = not self.pinned
        self.storage.set(SIDEBAR_PINNED_KEY, "true" if self.pinned else "false")
        return self.pinned

    def hover(self, inside: bool) -> None:
        if inside and self.mobile_open:
            return
        self.hovered = inside
        if not inside:
            self.settings_open = False

    def open_mobile(self) -> None:
        self.mobile_open = True

    def navigate(self, href: str) -> NavItem | None:
        self.mobile_open = False
        return next((item for item in NAV_ITEMS if item.href == href), None)

    def is_active(self, item: NavItem, current_path: str) -> bool:
        return item.href == current_path
