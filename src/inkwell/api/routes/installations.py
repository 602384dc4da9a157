"""GitHub App installations owned by the signed-in user."""

from fastapi import APIRouter, Depends, Request

from inkwell.api.dependencies import get_authorized_db
from inkwell.api.errors import raise_internal_error
from inkwell.api.rate_limit import get_rate_limit, limiter
from inkwell.db.authorized import AuthorizedDb
from inkwell.errors import InkwellError

router = APIRouter(prefix="/installations", tags=["installations"])


@router.get("")
@limiter.limit(get_rate_limit("api"))
async def list_installations(request: Request, db: AuthorizedDb = Depends(get_authorized_db)):
    try:
        installations = await db.installations.find_all()
    except InkwellError:
        raise
    except Exception as e:
        raise_internal_error(
            e,
            context="listing installations",
            message="Failed to fetch installations",
            log_details={"owner_id": db.owner_id},
        )

    return {
        "data": [
            {
                "id": i.installation_id,
                "accountLogin": i.account_login,
                "accountType": i.account_type,
                "avatarUrl": i.account_avatar,
            }
            for i in installations
        ]
    }
