from __future__ import annotations

from fastapi import APIRouter, Depends

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.auth import verify_api_key
from app.core.rate_limit import get_rate_limiter
from app.schemas.rate_limit import RateLimitCheckRequest, RateLimitCheckResponse

router = APIRouter(tags=["Rate Limit"])


@router.post(
    "/rate-limit/check",
    response_model=RateLimitCheckResponse,
    dependencies=[Depends(verify_api_key)],
)
def check_rate_limit(
    payload: RateLimitCheckRequest,
    limiter: AbstractRateLimiter = Depends(get_rate_limiter),
) -> RateLimitCheckResponse:
    """Consume one admission for ``payload.key``.

    A denial is a normal outcome here, so the response is always 200 and the
    caller decides how to reject its own request.
    """

    decision = limiter.check(payload.key, payload.max_requests)
    return RateLimitCheckResponse(
        allowed=decision.allowed,
        retry_after_ms=decision.retry_after_ms,
    )
