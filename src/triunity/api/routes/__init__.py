from .telemetry import router as telemetry_router

__all__ = ["telemetry_router"]
