# testgenium/api/v1/router.py
from fastapi import APIRouter

from testgenium.api.v1 import auth, jobs, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
