from fastapi import FastAPI

from app.api import assistant

app = FastAPI(title="HealthLink", version="0.1.0")

# Include routers
app.include_router(assistant.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
