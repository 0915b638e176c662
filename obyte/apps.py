"""
Static application registry.

Every name here gets a bound composer on each Client, built once at
construction time. A bound composer fixes the application tag and
delegates to ``Client.compose`` / ``Client.post``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

APPS: tuple[str, ...] = (
    "address_definition_change",
    "asset",
    "asset_attestors",
    "attestation",
    "data",
    "data_feed",
    "definition",
    "definition_template",
    "payment",
    "poll",
    "profile",
    "text",
    "vote",
)

ComposeFn = Callable[..., Awaitable[dict[str, Any]]]
PostFn = Callable[..., Awaitable[str]]


@dataclass(frozen=True)
class AppComposer:
    """Composer and poster for one application tag."""

    app: str
    compose_fn: ComposeFn
    post_fn: PostFn

    async def compose(self, payload: Any, **options: Any) -> dict[str, Any]:
        return await self.compose_fn(self.app, payload, **options)

    async def post(self, payload: Any, **options: Any) -> str:
        return await self.post_fn(self.app, payload, **options)


def build_registry(compose_fn: ComposeFn, post_fn: PostFn) -> dict[str, AppComposer]:
    """Bind every registered application to the given compose/post pair."""
    return {app: AppComposer(app, compose_fn, post_fn) for app in APPS}
