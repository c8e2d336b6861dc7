from typing import Any, TYPE_CHECKING, cast

from fastapi import HTTPException, Request, status

if TYPE_CHECKING:
    from doppel_feed.letterboxd_service import LetterboxdService


def _get_state_attr(request: Request, name: str, error_detail: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail,
        )
    return value


def get_letterboxd_service(request: Request) -> "LetterboxdService":
    return cast(
        "LetterboxdService",
        _get_state_attr(
            request, "letterboxd_service", "Letterboxd service not initialized"
        ),
    )
