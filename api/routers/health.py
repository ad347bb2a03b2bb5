"""
Health check endpoint.

Load balancers and container orchestrators hit this to decide whether the
service is up. It does not call the AI service: an upstream outage should
fail jobs, not take the API out of rotation.
"""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    return {"status": "healthy"}
