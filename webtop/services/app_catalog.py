from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

DEFAULT_ICON = "🖥️"


@dataclass(slots=True)
class AppEntry:
    id: str
    name: str
    icon: str = DEFAULT_ICON
    description: str = ""
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "categories": list(self.categories),
        }

    @classmethod
    def from_backend(cls, data: Dict[str, Any]) -> "AppEntry":
        """Normalize an installed app or package record from the backend."""
        name = str(data.get("name") or data.get("id") or "").strip()
        categories = data.get("categories") or []
        if isinstance(categories, str):
            categories = [c for c in categories.split(";") if c]
        return cls(
            id=str(data.get("id") or name),
            name=name,
            icon=data.get("icon") or DEFAULT_ICON,
            description=str(data.get("description") or ""),
            categories=[str(c) for c in categories],
        )


BUILTIN_APPS: List[AppEntry] = [
    AppEntry("terminal", "Terminal", "📟", "System terminal with shell access", ["System"]),
    AppEntry("filemanager", "File Manager", "📂", "Browse and manage files", ["System"]),
    AppEntry("notes", "Notes", "📝", "Markdown notes editor", ["Office"]),
    AppEntry("editor", "Text Editor", "💻", "Monaco code editor", ["Development"]),
    AppEntry("containers", "Containers", "🐳", "Docker container management", ["System"]),
    AppEntry("controlpanel", "Control Panel", "⚙️", "System settings and configuration", ["Settings"]),
    AppEntry("virtual-desktops", "Virtual Desktops", "🖥️", "Switch and manage desktops", ["Settings"]),
    AppEntry("ai-integration", "AI Integration", "🤖", "AI services and chat", ["AI"]),
    AppEntry("ai-models", "AI Models", "🧠", "Model routing and status", ["AI"]),
    AppEntry("storage-pools", "Storage Pools", "💾", "Manage pools and volumes", ["Storage"]),
    AppEntry("proxy", "Proxy", "🌐", "Nginx proxy status", ["Network"]),
    AppEntry("shares", "Shares", "📁", "NFS/SMB shares", ["Storage", "Network"]),
    AppEntry("wifi", "WiFi", "📶", "WiFi interfaces and networks", ["Network"]),
    AppEntry("media", "Media Server", "🎬", "Libraries and transcoding", ["Multimedia"]),
    AppEntry("home-assistant", "Home Assistant", "🏠", "Smart home status", ["Home"]),
    AppEntry("power", "Power", "🔋", "Power controls and status", ["System"]),
    AppEntry("monitoring", "Monitoring", "📊", "System monitoring dashboard", ["System"]),
]


def builtin_apps() -> List[AppEntry]:
    return [
        AppEntry(a.id, a.name, a.icon, a.description, list(a.categories))
        for a in BUILTIN_APPS
    ]
