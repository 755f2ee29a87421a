from fastapi import APIRouter

from syllabuild.api.routes import ai, documents
from syllabuild.schemas.ai import ErrorResponse

api_router = APIRouter()

# Every failure is rendered as {"error": message} by the handler in main
error_responses = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    500: {"model": ErrorResponse, "description": "Generation or upstream failure"},
}

api_router.include_router(ai.router, prefix="/ai", tags=["ai"], responses=error_responses)
api_router.include_router(documents.router, prefix="/documents", tags=["documents"], responses=error_responses)
