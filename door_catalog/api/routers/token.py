"""
door_catalog/api/routers/token.py

GET /token: returns the upstream OAuth token, served from the cache while
it is still valid. Mounted only when the auth configuration is present.
"""
from fastapi import APIRouter, Request

router = APIRouter(tags=["token"])


@router.get("/token")
def get_token(request: Request):
    return request.app.state.token_cache.get()
