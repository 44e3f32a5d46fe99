from fastapi import Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logger import logger

# Shown in the chat widget whenever the message flow fails
APOLOGY_MESSAGE = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Please try again."
)


class ChatbotError(Exception):
    """Base error. `public_message` is the only text a client ever sees."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        if message is not None:
            self.public_message = message


class ValidationError(ChatbotError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid request"


class NotFoundError(ChatbotError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not found"


class UpstreamStoreError(ChatbotError):
    """Any failure talking to the database. The message passed in is logged,
    never returned."""

    def __init__(self, detail: str = ""):
        super().__init__()
        self.detail = detail

    def __str__(self):
        return self.detail or self.public_message


async def chatbot_error_handler(request: Request, exc: ChatbotError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.public_message},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed requests to the widget endpoints get the widget's error shape;
    everything else keeps FastAPI's 422."""
    if not request.url.path.startswith(f"{settings.API_V1_STR}/chatbot/"):
        return await request_validation_exception_handler(request, exc)
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return await chatbot_error_handler(request, ValidationError())
