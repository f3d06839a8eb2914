import logging
from contextlib import contextmanager

from fastapi import HTTPException, status

from quluub.integrations import ProviderError
from quluub.services.errors import ServiceError

logger = logging.getLogger(__name__)


@contextmanager
def service_errors():
    """Translate service and provider failures into HTTP errors."""
    try:
        yield
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except ProviderError as e:
        logger.error("Provider failure: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message or "Payment provider error",
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
