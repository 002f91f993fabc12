from fastapi import APIRouter

from policy_monitor.api.v1 import health, pipeline, policies

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(policies.router, prefix="/policies", tags=["policies"])
v1_router.include_router(pipeline.router, tags=["pipeline"])
v1_router.include_router(health.router, prefix="/health", tags=["health"])
