from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("spot.api")


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched, neither are the explicit
    {"message": ...} errors views return through api_error().
    Only raised errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it (validation, auth, 404, throttling), wrap it
    if response is not None:
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": response.data,
            },
            status=response.status_code,
            headers=_passthrough_headers(response),
        )

    # Unhandled exceptions -> 500, detail stays in the log
    view = context.get("view")
    logger.exception(
        "Unhandled API exception in %s",
        view.__class__.__name__ if view is not None else "unknown view",
        exc_info=exc,
    )

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _passthrough_headers(response):
    # Keep Retry-After (throttles) and WWW-Authenticate (401s)
    return {
        name: response[name]
        for name in ("Retry-After", "WWW-Authenticate")
        if response.has_header(name)
    }
