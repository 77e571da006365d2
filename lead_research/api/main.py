"""FastAPI application setup."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lead_research.models.database import init_db
from .routes import router

# Initialize database
init_db()

# Create FastAPI app
app = FastAPI(
    title="Lead Research Agent",
    description="Extract funded companies from newsletters, score them against an ICP, and draft outreach",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


# Include API routes
app.include_router(router, prefix="/api")
