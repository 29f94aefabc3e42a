import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import socialfeed.db.models  # registers every model on Base.metadata
from socialfeed.api.v1 import auth, user
from socialfeed.core import config
from socialfeed.db.base import Base
from socialfeed.db.session import engine
from socialfeed.routers import post, like, comment, follow

logging.basicConfig(level=logging.INFO)

Base.metadata.create_all(bind=engine)
config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[config.RATE_LIMIT],
    enabled=config.RATE_LIMIT_ENABLED,
)

app = FastAPI(title="SocialFeed")
app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error leaves the API as {"error": message}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail if isinstance(exc.detail, str) else str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    message = f"Missing or invalid fields: {', '.join(fields)}" if fields else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


# sync: SlowAPIMiddleware calls this directly and expects a response back
@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"error": "Too many requests, please try again later"})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logging.error(f"Database error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"error": "Database error"})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(user.router, prefix="/api/users", tags=["Users"])
app.include_router(follow.router, prefix="/api/users", tags=["Follows"])
app.include_router(post.router, prefix="/api/posts", tags=["Posts"])
app.include_router(like.router, prefix="/api/posts", tags=["Likes"])
app.include_router(comment.router, prefix="/api/posts", tags=["Comments"])

app.mount(config.UPLOAD_URL_PREFIX, StaticFiles(directory=config.UPLOAD_DIR), name="uploads")


@app.get("/health")
def health():
    return {"status": "healthy"}
