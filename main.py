from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from quincy.core.errors import QuincyError, TransientStoreError, UpstreamServiceError
from quincy.core.logging import setup_logging
from quincy.routes.auth.auth_routers import auth_router
from quincy.routes.event.event_routers import event_router
from quincy.routes.record.record_routers import record_router
from quincy.routes.interest.interest_routers import interest_router, connection_router
from quincy.routes.navigation.navigation_routers import navigation_router

setup_logging()

app = FastAPI(title="Quincy API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(event_router)
app.include_router(record_router)
app.include_router(interest_router)
app.include_router(connection_router)
app.include_router(navigation_router)


@app.exception_handler(QuincyError)
async def quincy_error_handler(request: Request, exc: QuincyError):
    if isinstance(exc, TransientStoreError):
        logger.warning("{} {} failed: {}", request.method, request.url.path, exc.message)
    body = {"detail": exc.message}
    if exc.context:
        body["context"] = exc.context
    if isinstance(exc, (TransientStoreError, UpstreamServiceError)):
        body["retryable"] = True
    return JSONResponse(status_code=exc.status_code, content=body)


@app.get("/", response_class=HTMLResponse)
async def read_root():
    return """
    <html>
        <head>
            <title>Quincy</title>
        </head>
        <body>
            <h1>Quincy API</h1>
            <p>Bring a record, find your people. API docs are <a href="/docs">here</a>.</p>
        </body>
    </html>
    """
