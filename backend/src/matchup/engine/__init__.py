"""Request engine - runs CRUD requests through the hook pipeline."""

from matchup.engine.request import Finalizer, Renderer, RequestEngine, render_record

__all__ = ["Finalizer", "Renderer", "RequestEngine", "render_record"]
