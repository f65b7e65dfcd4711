"""JSON HTTP API exposing the PhishGuard service actions."""

from __future__ import annotations

import logging

from aiohttp import web

from ..service import PhishGuardService

logger = logging.getLogger(__name__)

LIST_NAMES = ("whitelist", "blacklist")


class ApiServer:
    """Serves classification, history, stats and list endpoints."""

    def __init__(self, service: PhishGuardService, host: str, port: int):
        self.service = service
        self.host = host
        self.port = port
        self._app = self._build_app()
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/healthz", self._handle_health)
        app.router.add_post("/api/analyze", self._handle_analyze)
        app.router.add_get("/api/stats", self._handle_stats)
        app.router.add_get("/api/history", self._handle_history)
        app.router.add_delete("/api/history", self._handle_clear_history)
        app.router.add_get("/api/lists", self._handle_lists)
        app.router.add_post("/api/lists/{name}", self._handle_list_add)
        app.router.add_delete("/api/lists/{name}/{domain}", self._handle_list_remove)
        return app

    async def start(self):
        """Start the API server."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()
        logger.info("API server listening on %s:%s", self.host, self.port)

    async def stop(self):
        """Stop the API server."""
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()
        self._runner = None
        self._site = None

    async def _read_json(self, request: web.Request) -> dict:
        try:
            data = await request.json()
        except ValueError:
            raise web.HTTPBadRequest(text="Request body must be JSON")
        if not isinstance(data, dict):
            raise web.HTTPBadRequest(text="Request body must be a JSON object")
        return data

    @staticmethod
    def _list_name(request: web.Request) -> str:
        name = request.match_info["name"]
        if name not in LIST_NAMES:
            raise web.HTTPNotFound(text=f"Unknown list: {name}")
        return name

    async def _handle_health(self, request):  # noqa: ANN001
        """Return JSON health status."""
        try:
            payload = self.service.status() or {}
        except Exception as exc:
            logger.warning("Health status provider failed: %s", exc)
            payload = {"status": "error", "message": str(exc)}
        payload.setdefault("status", "ok")
        return web.json_response(payload)

    async def _handle_analyze(self, request):  # noqa: ANN001
        data = await self._read_json(request)
        url = str(data.get("url") or "").strip()
        if not url:
            raise web.HTTPBadRequest(text="Missing 'url'")

        verdict = await self.service.analyze_url(url)
        payload = verdict.to_dict()
        payload["should_block"] = verdict.should_block
        return web.json_response(payload)

    async def _handle_stats(self, request):  # noqa: ANN001
        stats = await self.service.get_stats()
        return web.json_response(stats.to_dict())

    async def _handle_history(self, request):  # noqa: ANN001
        try:
            limit = int(request.query.get("limit", "50"))
        except ValueError:
            raise web.HTTPBadRequest(text="'limit' must be an integer")
        return web.json_response(await self.service.get_history(limit))

    async def _handle_clear_history(self, request):  # noqa: ANN001
        await self.service.clear_history()
        return web.json_response({"success": True})

    async def _handle_lists(self, request):  # noqa: ANN001
        return web.json_response(await self.service.get_lists())

    async def _handle_list_add(self, request):  # noqa: ANN001
        name = self._list_name(request)
        data = await self._read_json(request)
        domain = str(data.get("domain") or "").strip()
        if not domain:
            raise web.HTTPBadRequest(text="Missing 'domain'")

        if name == "whitelist":
            added = await self.service.add_to_whitelist(domain)
        else:
            added = await self.service.add_to_blacklist(domain)
        return web.json_response({"success": True, "added": added})

    async def _handle_list_remove(self, request):  # noqa: ANN001
        name = self._list_name(request)
        domain = request.match_info["domain"]

        if name == "whitelist":
            removed = await self.service.remove_from_whitelist(domain)
        else:
            removed = await self.service.remove_from_blacklist(domain)
        return web.json_response({"success": True, "removed": removed})
