from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
	cache = getattr(request.app.state, "cache", None)
	return {"status": "ok", "cache": cache.stats if cache is not None else None}
