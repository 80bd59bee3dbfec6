"""FastAPI application exposing the latest host snapshot."""

from fastapi import FastAPI, HTTPException, status

from hostmon.store import SnapshotStore


def create_app(store: SnapshotStore) -> FastAPI:
    app = FastAPI(
        title="hostmon",
        description="Latest host resource snapshot, refreshed in the background.",
        version="0.1.0",
    )

    @app.get("/api/stats", summary="Return the latest host snapshot", tags=["stats"])
    @app.get("/api.json", include_in_schema=False)
    def stats() -> dict:
        snapshot = store.read()
        if snapshot is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Stats not available yet",
            )
        return snapshot.to_dict()

    @app.get("/health", summary="Service health check", tags=["system"])
    def health() -> dict:
        return {"status": "ok", "ready": store.read() is not None}

    return app
