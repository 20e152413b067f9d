import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.config import LOG_DIR, LOG_LEVEL
from tasktracker.database import Base, engine
from tasktracker.errors import Forbidden, NotFound, StorageError, ValidationError
from tasktracker.logging_setup import setup_logging
from tasktracker.models.task import Task
from tasktracker.routers import auth, tasks

setup_logging(LOG_LEVEL, LOG_DIR or None)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

# Columns added after the first release of the tasks table
_ADDITIVE_COLUMNS = {
    "description": None,
    "priority": "'medium'",
    "due_date": None,
}


# Ensure new columns exist without Alembic (simple additive migrations)
def _ensure_schema():
	try:
		insp = inspect(engine)
		cols = [c['name'] for c in insp.get_columns('tasks')]
		missing = [name for name in _ADDITIVE_COLUMNS if name not in cols]
		if not missing:
			return
		with engine.begin() as conn:
			for name in missing:
				col_type = Task.__table__.c[name].type.compile(dialect=engine.dialect)
				ddl = f'ALTER TABLE tasks ADD COLUMN {name} {col_type}'
				if _ADDITIVE_COLUMNS[name] is not None:
					ddl += f' NOT NULL DEFAULT {_ADDITIVE_COLUMNS[name]}'
				conn.execute(text(ddl))
				logger.info("Added missing column tasks.%s", name)
	except SQLAlchemyError:
		# best-effort; don't block startup
		logger.warning("Schema check for tasks table failed", exc_info=True)

_ensure_schema()

app = FastAPI(title="TaskTracker API")

# API routers
app.include_router(auth.router)
app.include_router(tasks.router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
	return JSONResponse(status_code=422, content={"detail": "The given data was invalid.", "errors": exc.as_dict()})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
	return JSONResponse(status_code=404, content={"detail": "Task not found"})


@app.exception_handler(Forbidden)
async def forbidden_handler(request: Request, exc: Forbidden):
	return JSONResponse(status_code=403, content={"detail": "Unauthorized"})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
	logger.error(
		"Storage failure. Operation: %s, User ID: %s, Task ID: %s",
		exc.operation, exc.caller_id, exc.task_id,
		exc_info=exc.__cause__ or exc,
	)
	return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Generic error handler to return JSON errors for unexpected exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
	logger.exception("Unhandled error on %s %s", request.method, request.url.path)
	return JSONResponse(status_code=500, content={"detail": "Internal server error"})
