"""Public client configuration endpoint."""

from fastapi import APIRouter

from config.settings import settings
from schemas.staff import PublicConfigResponse

router = APIRouter()


@router.get(
    "",
    response_model=PublicConfigResponse,
    summary="Client Configuration",
    description="Supabase URL and anon key for the browser client.",
)
async def get_public_config() -> PublicConfigResponse:
    # Never the service-role key.
    return PublicConfigResponse(
        supabase_url=settings.supabase_url,
        supabase_key=settings.supabase_anon_key,
    )
