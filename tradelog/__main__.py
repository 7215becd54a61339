import uvicorn

from tradelog.config.settings import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "tradelog.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_config=None
    )


if __name__ == "__main__":
    main()
