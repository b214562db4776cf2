from __future__ import annotations

from typing import Any, Dict, List

from .panels import Action, ResourcePanel, Section, render_items


def _rows(fmt):
    """Renderer that formats each item of a list with ``fmt``."""

    def render(data: Any) -> List[str]:
        if isinstance(data, dict):
            for key in ("items", "data", "results"):
                if isinstance(data.get(key), list):
                    data = data[key]
                    break
        if not isinstance(data, list):
            return render_items(data)
        return [fmt(item) if isinstance(item, dict) else str(item) for item in data]

    return render


def _key_values(*keys: str):
    def render(data: Any) -> List[str]:
        if not isinstance(data, dict):
            return render_items(data)
        return [f"{key}: {data[key]}" for key in keys if key in data]

    return render


_interface = _rows(lambda i: f"{i.get('name')} • {i.get('state', 'unknown')}")
_network = _rows(lambda n: f"{n.get('ssid')} • {n.get('signalStrength', '?')}dBm")
_pool = _rows(lambda p: f"{p.get('name')} • {p.get('type', '')} • {p.get('path', '')}")
_disk = _rows(lambda d: f"{d.get('name') or d.get('device')} • {d.get('size', '')}")
_nfs = _rows(lambda s: f"{s.get('path')} → {s.get('clients', '*')}")
_smb = _rows(lambda s: f"{s.get('name')} • {s.get('path', '')}")
_container = _rows(lambda c: f"{c.get('name') or c.get('id')} • {c.get('status') or c.get('state', '')}")
_entity = _rows(lambda e: f"{e.get('entity_id')} • {e.get('state', '')}")


def build_panels(container_timeout: float = 30.0) -> Dict[str, ResourcePanel]:
    panels = [
        ResourcePanel(
            "wifi",
            "WiFi Management",
            [
                Section("interfaces", "Interfaces", "/api/wifi-management/interfaces",
                        "Failed to load interfaces", "No interfaces", renderer=_interface),
                Section("networks", "Networks", "/api/wifi-management/scan",
                        "Scan failed", "No networks", method="POST", payload={}, renderer=_network),
            ],
            [
                Action("connect", "POST", "/api/wifi-management/connect",
                       required=("ssid",), required_message="SSID required",
                       fields=("ssid", "password"), refresh=("networks", "interfaces")),
                Action("disconnect", "POST", "/api/wifi-management/disconnect",
                       required=("interface",), required_message="Interface required",
                       fields=("interface",), refresh=("interfaces",)),
                Action("scan", "POST", "/api/wifi-management/scan", refresh=("networks",)),
            ],
        ),
        ResourcePanel(
            "storage-pools",
            "Storage Pools",
            [
                Section("pools", "Pools", "/api/storage-pools/pools", "Failed to load pools",
                        "No pools configured", renderer=_pool),
                Section("stats", "Summary", "/api/storage-pools/stats", "Failed to load stats",
                        renderer=_key_values("totalPools", "mountedPools", "totalSize", "usedSize")),
                Section("disks", "Local disks", "/api/storage-pools/scan/local", "Failed to load disks",
                        "No disks found", renderer=_disk),
            ],
            [
                Action("create", "POST", "/api/storage-pools/pools",
                       required=("name", "path"), required_message="Name and path are required",
                       fields=("name", "type", "path", "description"), refresh=("pools", "stats")),
                Action("update", "PUT", "/api/storage-pools/pools/{id}",
                       required=("id", "name", "path"), required_message="Name and path are required",
                       fields=("name", "type", "path", "description"), refresh=("pools",)),
                Action("delete", "DELETE", "/api/storage-pools/pools/{id}",
                       required=("id",), refresh=("pools", "stats"), confirm_message="Delete this pool?"),
                Action("mount", "POST", "/api/storage-pools/pools/{id}/mount",
                       required=("id",), refresh=("pools", "stats")),
                Action("unmount", "POST", "/api/storage-pools/pools/{id}/unmount",
                       required=("id",), refresh=("pools", "stats")),
                Action("test", "POST", "/api/storage-pools/test",
                       required=("path",), required_message="Path / URL is required", fields=("type", "path")),
            ],
        ),
        ResourcePanel(
            "shares",
            "Shares Manager",
            [
                Section("nfs", "NFS shares", "/api/shares/nfs", "Failed to load NFS shares",
                        "No NFS shares", renderer=_nfs),
                Section("smb", "SMB shares", "/api/shares/smb", "Failed to load SMB shares",
                        "No SMB shares", renderer=_smb),
                Section("smb-users", "SMB users", "/api/shares/smb/users", "Failed to load SMB users",
                        "No SMB users", renderer=_rows(lambda u: str(u.get("username")))),
            ],
            [
                Action("add-nfs", "POST", "/api/shares/nfs", required=("path",),
                       required_message="Path required", fields=("path", "clients", "options"), refresh=("nfs",)),
                Action("delete-nfs", "DELETE", "/api/shares/nfs/{id}", required=("id",), refresh=("nfs",),
                       confirm_message="Delete NFS share?"),
                Action("add-smb", "POST", "/api/shares/smb", required=("name", "path"),
                       required_message="Name and path required",
                       fields=("name", "path", "comment", "readOnly", "guestOk"), refresh=("smb",)),
                Action("delete-smb", "DELETE", "/api/shares/smb/{id}", required=("id",), refresh=("smb",),
                       confirm_message="Delete SMB share?"),
                Action("add-smb-user", "POST", "/api/shares/smb/users", required=("username", "password"),
                       required_message="Username and password required",
                       fields=("username", "password"), refresh=("smb-users",)),
                Action("reload-nfs", "POST", "/api/shares/nfs/reload", refresh=("nfs",)),
                Action("reload-smb", "POST", "/api/shares/smb/reload", refresh=("smb",)),
            ],
        ),
        ResourcePanel(
            "power",
            "Power Management",
            [
                Section("status", "Status", "/api/power-management/status", "Failed to load status",
                        renderer=_key_values("batteryLevel", "charging", "profile", "cpuGovernor", "brightness")),
                Section("config", "Rules and plans", "/api/power-management/config", "Failed to load rules"),
            ],
            [
                Action("run", "POST", "/api/power-management/{operation}",
                       required=("operation",), required_message="Operation required", refresh=("status",)),
                Action("brightness", "POST", "/api/power-management/brightness",
                       required=("level",), required_message="Brightness level required",
                       fields=("level",), refresh=("status",)),
                Action("cpu-governor", "POST", "/api/power-management/cpu-governor",
                       required=("governor",), required_message="Governor required",
                       fields=("governor",), refresh=("status",)),
            ],
        ),
        ResourcePanel(
            "media",
            "Media Server",
            [
                Section("config", "Server connections", "/api/media-server/config", "Failed to load config"),
                Section("libraries", "Libraries", "/api/media-server/libraries", "Failed to load",
                        "No libraries", renderer=_rows(lambda lib: f"{lib.get('name')} • {lib.get('type', '')}")),
                Section("transcoding", "Transcoding queue", "/api/media-server/transcoding/queue",
                        "Failed to load", "Queue empty",
                        renderer=_rows(lambda j: f"{j.get('id')} • {j.get('status', '')} • {j.get('progress', 0)}%")),
            ],
            [
                Action("scan", "POST", "/api/media-server/scan", refresh=("libraries",)),
                Action("transcode", "POST", "/api/media-server/transcode/{id}",
                       required=("id",), required_message="Item ID required",
                       fields=("profile",), refresh=("transcoding",)),
            ],
        ),
        ResourcePanel(
            "ai-integration",
            "AI Integration",
            [
                Section("services", "Services", "/api/ai-integration/services", "Failed to load services",
                        "No services", renderer=_rows(lambda s: f"{s.get('name')} • {s.get('status', '')}")),
                Section("workflows", "Workflows", "/api/ai-integration/workflows", "Failed to load workflows",
                        "No workflows"),
                Section("events", "Security events", "/api/ai-integration/security/events",
                        "Failed to load events", "No events",
                        renderer=_rows(lambda e: f"{e.get('type')} • {e.get('severity', '')} • {e.get('message', '')}")),
            ],
            [
                Action("create-workflow", "POST", "/api/ai-integration/workflows",
                       required=("name",), required_message="Name required",
                       fields=("name", "description", "trigger"), refresh=("workflows",)),
                Action("delete-workflow", "DELETE", "/api/ai-integration/workflows/{id}",
                       required=("id",), refresh=("workflows",)),
                Action("resolve-event", "PUT", "/api/ai-integration/security/events/{id}/resolve",
                       required=("id",), refresh=("events",)),
            ],
        ),
        ResourcePanel(
            "ai-models",
            "AI Model Manager",
            [
                Section("status", "Providers", "/api/ai-model-manager/status", "Failed to load"),
                Section("config", "Task routing", "/api/ai-model-manager/config", "Failed to load"),
            ],
            [
                Action("add-task", "POST", "/api/ai-model-manager/tasks",
                       required=("taskType", "model"), required_message="Task type and model are required",
                       fields=("taskType", "model", "provider"), refresh=("config",)),
                Action("test-ollama", "POST", "/api/ai-model-manager/test/ollama", refresh=("status",)),
                Action("test-openrouter", "POST", "/api/ai-model-manager/test/openrouter", refresh=("status",)),
            ],
        ),
        ResourcePanel(
            "containers",
            "Container Management",
            [
                Section("containers", "Containers", "/api/containers", "Failed to load containers",
                        "No containers", renderer=_container),
            ],
            [
                Action("start", "POST", "/api/containers/{id}/start", required=("id",), refresh=("containers",)),
                Action("stop", "POST", "/api/containers/{id}/stop", required=("id",), refresh=("containers",)),
                Action("restart", "POST", "/api/containers/{id}/restart", required=("id",), refresh=("containers",)),
            ],
            timeout=container_timeout,
            cancel_previous=True,
        ),
        ResourcePanel(
            "monitoring",
            "Monitoring",
            [
                Section("summary", "Summary", "/api/system-monitoring", "Failed to load"),
                Section("performance", "Performance", "/api/system-monitoring/performance", "Failed to load"),
                Section("disk-io", "Disk I/O", "/api/system-monitoring/disk-io", "Failed to load"),
            ],
        ),
        ResourcePanel(
            "proxy",
            "Nginx Proxy",
            [
                Section("status", "Status", "/api/nginx-proxy/status", "Failed to load status"),
            ],
            [
                Action("reload", "POST", "/api/nginx-proxy/reload", refresh=("status",)),
            ],
        ),
        ResourcePanel(
            "home-assistant",
            "Home Assistant",
            [
                Section("status", "Status", "/api/home-assistant/status", "Failed to load"),
                Section("entities", "Entities", "/api/home-assistant/entities", "Failed to load entities",
                        "No entities", renderer=_entity),
            ],
            [
                Action("call-service", "POST", "/api/home-assistant/services/{domain}/{service}",
                       required=("domain", "service"), required_message="Domain and service required",
                       fields=("entity_id",), refresh=("entities",)),
            ],
        ),
    ]
    return {panel.app_id: panel for panel in panels}
