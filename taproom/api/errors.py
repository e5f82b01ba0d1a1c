from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from taproom.services.employees import DuplicateEmployeeError
from taproom.services.errors import (
    NotFoundError,
    ProtectedShiftError,
    TemplateApplyError,
    TemplateStorageError,
)

log = logging.getLogger(__name__)


@contextmanager
def service_errors(what: str) -> Iterator[None]:
    """Translate service failures raised inside the block into HTTP errors."""
    try:
        yield
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except (ProtectedShiftError, DuplicateEmployeeError) as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except TemplateStorageError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    except (TemplateApplyError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SQLAlchemyError as e:
        log.warning("%s storage failed: %s", what, e)
        raise HTTPException(status_code=500, detail=f"{what} storage is not available") from e
