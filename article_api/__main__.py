import uvicorn

from article_api.config import settings


def main() -> None:
    # uvicorn traps SIGINT/SIGTERM and drains in-flight requests before the
    # lifespan shutdown disposes the connection pool.
    uvicorn.run(
        "article_api.main:app",
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        timeout_graceful_shutdown=settings.SHUTDOWN_TIMEOUT_SECONDS,
        log_config=None,
    )


if __name__ == "__main__":
    main()
