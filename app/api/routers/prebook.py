from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_use_cases
from app.api.schemas.prebook import PrebookRequestIn, PrebookResponse
from app.domain.errors import ValidationError

router = APIRouter()


@router.post("/prebook", response_model=PrebookResponse, response_model_exclude_none=True)
async def prebook_rate(
    payload: PrebookRequestIn,
    use_cases=Depends(get_use_cases),
):
    """Re-verify availability and price of a rate before payment."""
    try:
        result = await use_cases["prebook"].execute(payload.to_request())
    except ValidationError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": exc.detail},
        )

    body = PrebookResponse.model_validate(result)
    if result.is_unavailable:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    return body
