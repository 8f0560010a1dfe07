import os

import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    # Single worker by default: handlers are async and the Supabase client
    # and AKT+ option cache are per-process singletons.
    workers = int(os.environ.get("WEB_CONCURRENCY", 1))
    uvicorn.run(
        "tuning_catalog.app.main:app",
        host="0.0.0.0",
        port=port,
        workers=workers,
    )
