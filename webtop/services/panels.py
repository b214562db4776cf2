"""
Generic fetch-and-render panels over the backend REST API.

A panel is a list of sections (GET something, turn it into rows) plus a
list of actions (validate fields, send one request, refresh some sections).
DELETE actions are held back until the caller passes ``confirmed``.
Backend failures never escape a panel: a failed section shows its failure
text and a failed action is logged before the refresh still runs.
"""

from __future__ import annotations

import asyncio
import logging
import string
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote

import httpx

from ..utils.http import extract_http_error
from ..utils.http_client import BackendClient

logger = logging.getLogger("webtop.panels")

Renderer = Callable[[Any], List[str]]


class PanelError(Exception):
    pass


class PanelValidationError(PanelError):
    """A required action field was missing; raised before any request."""


class UnknownAction(PanelError):
    pass


def render_items(data: Any) -> List[str]:
    """Fallback renderer: one row per list item, or one per key of an object."""
    if data is None:
        return []
    if isinstance(data, list):
        return [_describe(item) for item in data]
    if isinstance(data, dict):
        return [f"{k}: {_describe(v)}" for k, v in data.items()]
    return [str(data)]


def _describe(value: Any) -> str:
    if isinstance(value, dict):
        label = value.get("name") or value.get("title") or value.get("id")
        return str(label) if label is not None else ", ".join(f"{k}={v}" for k, v in value.items())
    return str(value)


@dataclass(slots=True)
class Section:
    key: str
    title: str
    endpoint: str
    failure_text: str = "Failed to load"
    empty_text: str = "Nothing to show"
    method: str = "GET"
    payload: Optional[Dict[str, Any]] = None
    renderer: Renderer = render_items


@dataclass(slots=True)
class Action:
    name: str
    method: str
    endpoint: str
    required: Sequence[str] = ()
    required_message: Optional[str] = None
    fields: Sequence[str] = ()
    refresh: Sequence[str] = ()
    confirm: Optional[bool] = None  # defaults to True for DELETE
    confirm_message: Optional[str] = None

    def needs_confirmation(self) -> bool:
        return self.method == "DELETE" if self.confirm is None else self.confirm

    def path_fields(self) -> List[str]:
        return [name for _, name, _, _ in string.Formatter().parse(self.endpoint) if name]

    def validate(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        missing = [f for f in self.required if not str(params.get(f) or "").strip()]
        if missing:
            message = self.required_message or f"{', '.join(missing)} required"
            raise PanelValidationError(message)
        return {f: params[f] for f in self.fields if f in params}


@dataclass(slots=True)
class SectionState:
    key: str
    title: str
    status: str  # ready | error | cancelled
    rows: List[str] = field(default_factory=list)
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "status": self.status,
            "rows": list(self.rows),
            "message": self.message,
        }


@dataclass(slots=True)
class PanelView:
    app_id: str
    title: str
    sections: List[SectionState]
    actions: List[str] = field(default_factory=list)
    notice: Optional[str] = None
    confirm_action: Optional[str] = None

    def section(self, key: str) -> Optional[SectionState]:
        return next((s for s in self.sections if s.key == key), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app_id": self.app_id,
            "title": self.title,
            "sections": [s.to_dict() for s in self.sections],
            "actions": list(self.actions),
            "notice": self.notice,
            "confirm_action": self.confirm_action,
        }


class ResourcePanel:
    def __init__(
        self,
        app_id: str,
        title: str,
        sections: Sequence[Section],
        actions: Sequence[Action] = (),
        *,
        timeout: Optional[float] = None,
        cancel_previous: bool = False,
    ) -> None:
        self.app_id = app_id
        self.title = title
        self.sections = list(sections)
        self.actions = {a.name: a for a in actions}
        self.timeout = timeout
        self.cancel_previous = cancel_previous
        self._inflight: Optional[asyncio.Task] = None

    def _view(self, states: List[SectionState], notice: Optional[str] = None) -> PanelView:
        return PanelView(self.app_id, self.title, states, list(self.actions), notice)

    async def _load_section(self, client: BackendClient, section: Section) -> SectionState:
        kwargs: Dict[str, Any] = {}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        try:
            data = await client.request_json(section.method, section.endpoint, section.payload, **kwargs)
            rows = section.renderer(data)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[{self.app_id}] {section.key} failed: {e}")
            return SectionState(section.key, section.title, "error", message=section.failure_text)
        if not rows:
            return SectionState(section.key, section.title, "ready", message=section.empty_text)
        return SectionState(section.key, section.title, "ready", rows=rows)

    async def _load_many(self, client: BackendClient, sections: Sequence[Section]) -> List[SectionState]:
        return list(await asyncio.gather(*(self._load_section(client, s) for s in sections)))

    async def load(self, client: BackendClient, keys: Optional[Sequence[str]] = None) -> PanelView:
        """Fetch every section (or only ``keys``); one state per section."""
        sections = self.sections if keys is None else [s for s in self.sections if s.key in keys]
        if not self.cancel_previous:
            return self._view(await self._load_many(client, sections))

        if self._inflight is not None and not self._inflight.done():
            logger.debug(f"[{self.app_id}] cancelling previous load")
            self._inflight.cancel()
        task = asyncio.ensure_future(self._load_many(client, sections))
        self._inflight = task
        try:
            states = await task
        except asyncio.CancelledError:
            if task is self._inflight:
                raise
            # superseded by a newer load
            states = [SectionState(s.key, s.title, "cancelled") for s in sections]
        return self._view(states)

    async def run_action(self, client: BackendClient, name: str, params: Mapping[str, Any]) -> PanelView:
        action = self.actions.get(name)
        if action is None:
            raise UnknownAction(f"Unknown action '{name}' for {self.app_id}")
        body = action.validate(params)
        if action.needs_confirmation() and not params.get("confirmed"):
            logger.info(f"[{self.app_id}] {name} not confirmed, nothing sent")
            view = self._view([], notice=action.confirm_message or f"Confirm {name}?")
            view.confirm_action = name
            return view
        path = {f: quote(str(params.get(f, "")), safe="") for f in action.path_fields()}
        endpoint = action.endpoint.format(**path)

        notice = None
        try:
            result = await client.request_json(action.method, endpoint, body if action.method != "DELETE" else None)
            if isinstance(result, dict) and result.get("success") is False:
                notice = str(result.get("error") or "Request failed")
                logger.warning(f"[{self.app_id}] {name} rejected: {notice}")
        except httpx.HTTPStatusError as e:
            message, _ = extract_http_error(e.response)
            logger.warning(f"[{self.app_id}] {name} failed: {message}")
            notice = message
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[{self.app_id}] {name} failed: {e}")
            notice = "Request failed"

        keys = list(action.refresh)
        view = await self.load(client, keys) if keys else self._view([])
        view.notice = notice
        return view
